"""Settings shared by the command line and the web API.

Defaults and input ranges mirror the loan form the calculator was built
for. The ranges are what a front end should clamp its widgets to; the engine
validates independently and never applies them.
"""

from __future__ import annotations

import logging.config
import os
from decimal import Decimal
from typing import Any, Dict, Optional

DEFAULT_LOAN_AMOUNT = Decimal("2500000")
DEFAULT_INTEREST_RATE = Decimal("8.5")
DEFAULT_TENURE = 20
DEFAULT_TENURE_UNIT = "years"
DEFAULT_EXTRA_PAYMENT = Decimal("5000")
DEFAULT_ONE_TIME_PAYMENT = Decimal("100000")

INPUT_LIMITS: Dict[str, Dict[str, Any]] = {
    "principal": {"min": 100_000, "max": 50_000_000},
    "annual_rate_percent": {"min": 1, "max": 30},
    "tenure_months": {"min": 1, "max": 360},
    "tenure_years": {"min": 1, "max": 30},
}

MAX_COMPARISON_OPTIONS = 4

LOG_LEVEL_ENV = "EMI_CALC_LOG_LEVEL"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def logging_config(level: str) -> Dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "simple": {
                "format": "{levelname} {asctime} {name} {message}",
                "style": "{",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "simple",
            },
        },
        "root": {
            "handlers": ["console"],
            "level": "WARNING",
        },
        "loggers": {
            "emi_calc": {"level": level},
            "emi_calc_web": {"level": level},
        },
    }


def configure_logging(level: Optional[str] = None) -> str:
    """Configure console logging for the calculator packages and return the level used.

    The level defaults to ``$EMI_CALC_LOG_LEVEL`` and then to ``WARNING``.
    """
    level = (level or os.environ.get(LOG_LEVEL_ENV) or "WARNING").upper()
    if level not in LOG_LEVELS:
        raise ValueError(f"Unknown log level: {level}")
    logging.config.dictConfig(logging_config(level))
    return level


def defaults() -> Dict[str, Any]:
    """Default form values and input ranges, JSON-serialisable."""
    return {
        "loan_amount": float(DEFAULT_LOAN_AMOUNT),
        "interest_rate": float(DEFAULT_INTEREST_RATE),
        "tenure": DEFAULT_TENURE,
        "tenure_unit": DEFAULT_TENURE_UNIT,
        "extra_payment": float(DEFAULT_EXTRA_PAYMENT),
        "one_time_payment": float(DEFAULT_ONE_TIME_PAYMENT),
        "limits": INPUT_LIMITS,
        "max_comparison_options": MAX_COMPARISON_OPTIONS,
    }
