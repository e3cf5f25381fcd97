"""Structured JSON logging"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from pythonjsonlogger import jsonlogger

from activ_gateway.config import settings

# httpx logs every request URL at INFO, including Gemini's ?key= query
QUIET_LOGGERS = ("httpx", "httpcore")


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Adds timestamp, level, service and Plaid environment to every record"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name
        log_record["plaid_env"] = settings.plaid_environment


def setup_logging(level: str = "INFO") -> None:
    """Send JSON lines to stdout from the root logger"""
    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def log_link_token(
    request_id: str,
    user_id: str,
    requested: List[str],
    products_used: Optional[List[str]],
    attempts: int,
    duration_ms: float,
) -> None:
    """One record per link token request, whether or not Plaid granted one"""
    logging.info(
        "Link token created" if products_used is not None else "Link token failed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "link_token_create",
            "products_requested": requested,
            "products_used": products_used,
            "products_dropped": sorted(set(requested) - set(products_used or [])),
            "attempts": attempts,
            "duration_ms": round(duration_ms, 1),
        },
    )
