"""Run the relay with uvicorn: ``python -m copilot_relay``."""
import uvicorn

from copilot_relay.config.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "copilot_relay.api.app:app",
        host=settings.host,
        port=settings.port,
        log_level="debug" if settings.debug else "info",
    )


if __name__ == "__main__":
    main()
