from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger("gatekeeper.events")


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(f"gatekeeper.{name}")


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def log_event(event: str, level: int = logging.INFO, **fields: Any) -> None:
    # Event logging never interrupts the request that emits it.
    try:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": event,
            **fields,
        }
        logger.log(level, json.dumps(entry, default=str))
    except Exception:
        logger.debug("dropped log event %s", event, exc_info=True)
