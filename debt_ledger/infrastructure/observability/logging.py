"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger
from debt_ledger.config import settings


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

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    logger.addHandler(handler)


def log_payment(
    request_id: str,
    account_id: str,
    debt_id: str,
    outcome: str,
    amount: int,
    duration_ms: float,
    installment_number: Optional[int] = None,
    transaction_id: Optional[str] = None,
) -> None:
    """Log structured installment payment outcome for analysis"""
    logging.info(
        "Installment payment completed",
        extra={
            "request_id": request_id,
            "account_id": account_id,
            "debt_id": debt_id,
            "step": "payment_complete",
            "payment_outcome": outcome,
            "amount": amount,
            "installment_number": installment_number,
            "transaction_id": transaction_id,
            "duration_ms": duration_ms,
        },
    )


def log_reconciliation(request_id: str, account_id: str, issue_count: int, repaired_count: int) -> None:
    """Log reconciliation pass results; drift is a warning"""
    level = logging.WARNING if issue_count else logging.INFO
    logging.log(
        level,
        "Reconciliation completed",
        extra={
            "request_id": request_id,
            "account_id": account_id,
            "step": "reconciliation_complete",
            "issue_count": issue_count,
            "repaired_count": repaired_count,
        },
    )
