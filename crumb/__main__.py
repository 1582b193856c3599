"""Run the demo server: python -m crumb"""

import uvicorn

from crumb.config.provider import EnvConfigProvider
from crumb.logging_config import configure_logging, get_logging_config
from crumb.main import create_app


def main() -> None:
    config_provider = EnvConfigProvider()
    api_config = config_provider.get_api_config()

    configure_logging(api_config.log_level)

    uvicorn.run(
        create_app(config_provider=config_provider),
        host=api_config.host,
        port=api_config.port,
        log_level=api_config.log_level.lower(),
        log_config=get_logging_config(api_config.log_level),
    )


if __name__ == "__main__":
    main()
