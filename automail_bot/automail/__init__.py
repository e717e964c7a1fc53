"""
Automatic report-mail schedules package.
Provides the eligibility rules, schedule normalizer and the Discord commands
for configuring recurring report mails.
"""

from .cog import AutoMailSchedules, setup
from .normalizer import normalize_schedule
from .rules import default_cadence_for_period, fallback_cadence, legal_cadences, legal_periods

__all__ = [
    "AutoMailSchedules",
    "setup",
    "normalize_schedule",
    "legal_periods",
    "legal_cadences",
    "default_cadence_for_period",
    "fallback_cadence",
]
