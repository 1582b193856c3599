from .provider import (
    APIConfig,
    ConfigProvider,
    EnvConfigProvider,
    SessionConfig,
    StoreConfig,
)

__all__ = ["APIConfig", "ConfigProvider", "EnvConfigProvider", "SessionConfig", "StoreConfig"]
