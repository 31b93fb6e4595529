"""Structured JSON logging for calculator outcomes"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from sure_forecast.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str | None = None) -> None:
    """
    Configure structured JSON logging on the root logger.

    The calculators and services only emit records; the embedding process
    (worker, job runner, web app) calls this once at startup so that
    projection, categorization and retirement outcomes reach stdout as JSON.
    """
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


def log_projection(
    family_id: str,
    sufficient_data: bool,
    error: str | None,
    monthly_rate_cents: int | None,
    timeframes: list[int],
    duration_ms: float,
) -> None:
    """Log structured projection outcome"""
    logging.info(
        "Projection completed",
        extra={
            "family_id": family_id,
            "step": "projection_complete",
            "outcome": "generated" if sufficient_data else error,
            "monthly_rate_cents": monthly_rate_cents,
            "timeframes": timeframes,
            "duration_ms": duration_ms,
        },
    )


def log_categorization(
    family_id: str,
    merchant_normalized: str,
    outcome: str,
    category_id: str | None = None,
    confidence: float | None = None,
) -> None:
    """Log suggestion, auto-apply and learning decisions for one merchant"""
    logging.info(
        "Categorization decision",
        extra={
            "family_id": family_id,
            "step": "categorization",
            "merchant": merchant_normalized,
            "outcome": outcome,
            "category_id": category_id,
            "confidence": confidence,
        },
    )


def log_prune(family_id: str, examined: int, deleted: int, reasons: Dict[str, int]) -> None:
    logging.info(
        "Pattern pruning completed",
        extra={
            "family_id": family_id,
            "step": "prune_complete",
            "examined": examined,
            "deleted": deleted,
            "reasons": reasons,
        },
    )


def log_retirement(is_on_track: bool, gap_cents: int, years_until_retirement: int, duration_ms: float) -> None:
    logging.info(
        "Retirement projection completed",
        extra={
            "step": "retirement_complete",
            "outcome": "on_track" if is_on_track else "short",
            "gap_cents": gap_cents,
            "years_until_retirement": years_until_retirement,
            "duration_ms": duration_ms,
        },
    )
