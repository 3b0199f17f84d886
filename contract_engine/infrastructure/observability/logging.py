"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from contract_engine.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: Optional[str] = None) -> None:
    """Configure structured JSON logging (defaults to settings.log_level)"""
    logger = logging.getLogger()
    logger.setLevel(level or settings.log_level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_assembly(
    request_id: str,
    student_name: str,
    page_count: int,
    signature_placement: str,
    degraded: bool,
    duration_ms: float,
) -> None:
    """Log structured contract assembly outcome"""
    logging.info(
        "Contract assembled",
        extra={
            "request_id": request_id,
            "student_name": student_name,
            "step": "assembly_complete",
            "page_count": page_count,
            "signature_placement": signature_placement,
            "degraded": degraded,
            "duration_ms": duration_ms,
        },
    )
