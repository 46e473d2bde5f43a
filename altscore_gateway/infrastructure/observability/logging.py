"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

SERVICE_NAME = "altscore-gateway"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.utcnow().isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = SERVICE_NAME


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_report(
    request_id: Optional[str],
    user_id: str,
    score: int,
    grade: str,
    explained: bool,
    duration_ms: float,
) -> None:
    """Log structured scoring outcome for analysis"""
    logging.info(
        "Scoring completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "scoring_complete",
            "score": score,
            "grade": grade,
            "explanation_outcome": "explained" if explained else "degraded",
            "duration_ms": duration_ms,
        },
    )
