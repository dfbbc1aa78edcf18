"""Structured JSON logging"""

import logging
import sys
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from fiado_ledger.utils.date_utils import utcnow


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter adding timestamp, level and service name"""

    def __init__(self, *args: Any, service_name: str = "fiado-ledger", **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = utcnow().isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = "fiado-ledger") -> None:
    """Configure structured JSON logging on stdout"""
    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        service_name=service_name,
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_closure(
    request_id: str,
    closure_id: int,
    mode: str,
    stamped_count: int,
    skipped_count: int,
    duration_ms: float,
) -> None:
    """Log structured closure outcome"""
    logging.info(
        "Closure completed",
        extra={
            "request_id": request_id,
            "closure_id": closure_id,
            "step": "closure_complete",
            "mode": mode,
            "stamped_count": stamped_count,
            "skipped_count": skipped_count,
            "duration_ms": duration_ms,
        },
    )
