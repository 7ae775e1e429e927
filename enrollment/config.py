"""Runtime settings for the enrollment roster.

Paths can be overridden through environment variables so a deployment can
point at its own catalog without touching the code.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.getenv("ENROLLMENT_DATA_DIR", BASE_DIR / "data"))

PLANS_CSV = Path(os.getenv("ENROLLMENT_PLANS_CSV", DATA_DIR / "plans.csv"))
STUDENTS_CSV = Path(os.getenv("ENROLLMENT_STUDENTS_CSV", DATA_DIR / "students.csv"))

# Fraction of a plan's capacity at which its badge turns amber / red.
CAPACITY_WARNING_RATIO = 0.75
CAPACITY_CRITICAL_RATIO = 0.90

LOG_LEVEL = os.getenv("ENROLLMENT_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(level=level or LOG_LEVEL, format=LOG_FORMAT)
