"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger
from vehicle_credit.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


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


def log_submission(request_id: str, application_id: str, applicant_id: str, listing_id: Optional[str]) -> None:
    """Log a newly submitted application"""
    logging.info(
        "Application submitted",
        extra={
            "request_id": request_id,
            "application_id": application_id,
            "applicant_id": applicant_id,
            "listing_id": listing_id,
            "step": "submit",
        },
    )


def log_transition(
    request_id: str,
    application_id: str,
    actor_id: str,
    action: str,
    outcome: str,
    status: Optional[str] = None,
) -> None:
    """Log the outcome of a review or cancellation action"""
    logging.info(
        "Transition processed",
        extra={
            "request_id": request_id,
            "application_id": application_id,
            "actor_id": actor_id,
            "step": "transition",
            "action": action,
            "outcome": outcome,
            "status": status,
        },
    )


def log_quote(request_id: str, partner_id: str, computable: bool, reason: Optional[str] = None) -> None:
    """Log a simulator quote; out-of-policy inputs are expected and logged at info"""
    logging.info(
        "Quote computed",
        extra={
            "request_id": request_id,
            "partner_id": partner_id,
            "step": "quote",
            "computable": computable,
            "reason": reason,
        },
    )
