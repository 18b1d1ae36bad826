"""Application entry point."""

import uvicorn

from .config import SETTINGS
from .logging_setup import setup_logging


def main() -> None:
    setup_logging()
    uvicorn.run(
        "liftlog.server.main:app",
        host=SETTINGS.HOST,
        port=SETTINGS.PORT,
        log_config=None,
    )


if __name__ == "__main__":
    main()
