"""Scheduling engine for generating guard schedules."""

from guardroster.scheduling.calendar_generator import (
    CalendarGenerator,
    generate_days_for_month,
)
from guardroster.scheduling.candidate_selector import CandidateSelector, ScoredCandidate
from guardroster.scheduling.preprocessor import preprocess_staff
from guardroster.scheduling.quota import calculate_fair_quotas
from guardroster.scheduling.rest_calculator import RestIntervalCalculator, hours_between
from guardroster.scheduling.scheduler import ShiftScheduler, generate_schedule

__all__ = [
    "CalendarGenerator",
    "CandidateSelector",
    "RestIntervalCalculator",
    "ScoredCandidate",
    "ShiftScheduler",
    "calculate_fair_quotas",
    "generate_days_for_month",
    "generate_schedule",
    "hours_between",
    "preprocess_staff",
]
