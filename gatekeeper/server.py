from __future__ import annotations

import uvicorn

from gatekeeper.config import load_settings
from gatekeeper.logging import configure_logging, get_logger
from gatekeeper.main import create_app

logger = get_logger("server")


def main() -> None:
    settings = load_settings()
    configure_logging(settings.log_level)
    app = create_app(settings)
    logger.info("API server running on http://localhost:%s", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
