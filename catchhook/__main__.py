"""
Run the server: python -m catchhook
"""
import uvicorn

from catchhook.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "catchhook.main:app",
        host=settings.app_host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
