import pytest
from starlette.responses import Response

from conftest import make_request, response_cookies
from crumb.modules.cookies import CookieSigner, SignedCookies


@pytest.fixture
def signer():
    return CookieSigner(["new-secret", "old-secret"])


@pytest.fixture
def cookies(signer):
    return SignedCookies(signer)


def test_signer_requires_keys():
    """Test a signer cannot be built without a secret."""
    with pytest.raises(ValueError, match="at least one"):
        CookieSigner([])

    with pytest.raises(ValueError):
        CookieSigner([""])


def test_sign_and_verify(signer):
    """Test signatures verify for the signed data only."""
    signature = signer.sign("key=value")

    assert signer.verify("key=value", signature)
    assert not signer.verify("key=other", signature)
    assert not signer.verify("key=value", signature[:-1] + ("A" if signature[-1] != "A" else "B"))


def test_signature_is_cookie_safe(signer):
    """Test signatures need no cookie quoting."""
    signature = signer.sign("key=value")

    assert "=" not in signature
    assert "+" not in signature
    assert "/" not in signature


def test_key_rotation(signer):
    """Test signatures from retired keys still verify."""
    old = CookieSigner(["old-secret"])
    signature = old.sign("key=value")

    assert signer.index("key=value", signature) == 1
    assert signer.index("key=value", signer.sign("key=value")) == 0
    assert CookieSigner(["unrelated"]).index("key=value", signature) == -1


def test_set_writes_value_and_signature(cookies, signer):
    """Test set emits the cookie and its signature cookie."""
    response = Response()

    cookies.set(response, "sid", "abc", domain="example.com", path="/app", secure=False)

    values = response_cookies(response)
    assert values == {"sid": "abc", "sid.sig": signer.sign("sid=abc")}

    headers = response.headers.getlist("set-cookie")
    assert all("Domain=example.com" in header for header in headers)
    assert all("Path=/app" in header for header in headers)
    assert all("Secure" not in header for header in headers)


def test_get_round_trip(cookies):
    """Test a cookie written by set is accepted by get."""
    response = Response()
    cookies.set(response, "sid", "q83vEjRWeJq8", secure=True)

    request = make_request(cookies=response_cookies(response))

    assert cookies.get(request, "sid") == "q83vEjRWeJq8"


def test_get_missing_cookie(cookies):
    assert cookies.get(make_request(), "sid") is None


def test_get_rejects_unsigned_cookie(cookies):
    """Test a cookie without signature is ignored."""
    assert cookies.get(make_request(cookies={"sid": "abc"}), "sid") is None


def test_get_rejects_tampered_cookie(cookies, signer):
    """Test a cookie whose value does not match its signature is ignored."""
    request = make_request(cookies={"sid": "evil", "sid.sig": signer.sign("sid=abc")})

    assert cookies.get(request, "sid") is None


def test_get_rejects_signature_for_other_name(cookies, signer):
    """Test a signature cannot be replayed under another cookie name."""
    request = make_request(cookies={"sid": "abc", "sid.sig": signer.sign("other=abc")})

    assert cookies.get(request, "sid") is None
