"""Revalidation progress aggregation.

Turns raw evidence records into per-requirement completion percentages,
an overall percentage and a coarse status for dashboards and exports.

Thresholds are the NMC's:

    practice hours        450  (900 for dual nurse + midwife registration)
    CPD hours              35
      of which participatory 20
    feedback records        5
    reflective accounts     5
    health declaration     present / absent
    confirmation           present / absent

The overall percentage is the unweighted mean of six terms: practice
hours, CPD, feedback, reflective accounts, health declaration and
confirmation.  Participatory CPD and the reflective discussion are
reported as their own categories but stay out of the mean unless
``include_participatory_in_overall`` is set.

Empty inputs degrade to zero; this module never raises for missing data.
"""

from __future__ import annotations

import logging
import math
from datetime import date

from revalpro.core.metrics import PROGRESS_CALCULATIONS
from revalpro.models.progress import (
    ProgressCategory,
    RequirementStatus,
    RevalidationProgress,
    RevalidationStatus,
    RevalidationSummaryData,
)
from revalpro.services.revalidation_dates import days_until, timeline_percent

logger = logging.getLogger(__name__)

DUAL_REGISTRATION = (
    "Registered Nurse and Midwife "
    "(including Registered Nurse/SCPHN and Midwife/SCPHN)"
)

REQUIRED_PRACTICE_HOURS = 450
REQUIRED_PRACTICE_HOURS_DUAL = 900
REQUIRED_CPD_HOURS = 35
REQUIRED_PARTICIPATORY_HOURS = 20
REQUIRED_FEEDBACK_RECORDS = 5
REQUIRED_REFLECTIVE_ACCOUNTS = 5

ATTENTION_WINDOW_DAYS = 60


def required_practice_hours(registration: str | None) -> int:
    if registration == DUAL_REGISTRATION:
        return REQUIRED_PRACTICE_HOURS_DUAL
    return REQUIRED_PRACTICE_HOURS


def _category(name: str, completed: float, required: float) -> ProgressCategory:
    percentage = completed / required * 100
    # min() would keep 100.0 against NaN
    percentage = 0.0 if math.isnan(percentage) else min(100.0, percentage)
    return ProgressCategory(
        name=name, required=required, completed=completed, percentage=percentage
    )


def _binary(name: str, present: bool) -> ProgressCategory:
    return ProgressCategory(
        name=name,
        required=1,
        completed=1 if present else 0,
        percentage=100.0 if present else 0.0,
        binary=True,
    )


def _status(
    mean: float, expiry_date: date | None, today: date
) -> RevalidationStatus:
    status = RevalidationStatus.NOT_STARTED
    if mean > 0:
        status = RevalidationStatus.IN_PROGRESS
    if mean >= 100:
        status = RevalidationStatus.COMPLETED
    if (
        expiry_date is not None
        and days_until(expiry_date, today) < ATTENTION_WINDOW_DAYS
        and mean < 100
    ):
        status = RevalidationStatus.ATTENTION
    return status


def calculate_progress(
    data: RevalidationSummaryData,
    *,
    today: date | None = None,
    include_participatory_in_overall: bool = False,
) -> RevalidationProgress:
    today = today or date.today()

    # Most recent practice record decides single vs dual registration.
    registration = (
        data.practice_hours[-1].registration if data.practice_hours else data.registration
    )
    practice = _category(
        "practice_hours",
        sum(r.hours for r in data.practice_hours),
        required_practice_hours(registration),
    )
    cpd = _category(
        "cpd", sum(r.hours for r in data.cpd_records), REQUIRED_CPD_HOURS
    )
    participatory = _category(
        "participatory_cpd",
        sum(r.hours for r in data.cpd_records if r.participatory),
        REQUIRED_PARTICIPATORY_HOURS,
    )
    feedback = _category(
        "feedback", len(data.feedback_records), REQUIRED_FEEDBACK_RECORDS
    )
    reflections = _category(
        "reflective_accounts",
        len(data.reflective_accounts),
        REQUIRED_REFLECTIVE_ACCOUNTS,
    )
    discussion = _binary("reflective_discussion", data.has_reflective_discussion)
    health = _binary("health_declaration", data.has_health_declaration)
    confirmation = _binary("confirmation", data.has_confirmation)

    terms = [practice, cpd, feedback, reflections, health, confirmation]
    if include_participatory_in_overall:
        terms.append(participatory)
    mean = sum(t.percentage for t in terms) / len(terms)
    # Half-up rounding: a 62.5 mean reports as 63.
    overall = math.floor(mean + 0.5)

    # Status uses the unrounded mean so 99.6 is never COMPLETED.
    status = _status(mean, data.expiry_date, today)
    PROGRESS_CALCULATIONS.labels(status=status.value).inc()
    logger.debug(
        "Progress computed overall=%d status=%s required_hours=%d",
        overall,
        status.value,
        practice.required,
    )

    return RevalidationProgress(
        practice_hours=practice,
        cpd=cpd,
        participatory_cpd=participatory,
        feedback=feedback,
        reflective_accounts=reflections,
        reflective_discussion=discussion,
        health_declaration=health,
        confirmation=confirmation,
        overall_percentage=overall,
        status=status,
        days_remaining=(
            days_until(data.expiry_date, today) if data.expiry_date else None
        ),
        timeline_percent=(
            timeline_percent(data.expiry_date, today) if data.expiry_date else None
        ),
    )


def requirement_status(category: ProgressCategory) -> RequirementStatus:
    """Per-card status shown beside each requirement on the dashboard."""
    if category.completed >= category.required:
        return RequirementStatus.COMPLETED
    if category.completed <= 0:
        return RequirementStatus.NOT_STARTED
    # 1-2 reflective accounts
    if category.name == "reflective_accounts" and category.completed < 3:
        return RequirementStatus.ATTENTION_NEEDED
    return RequirementStatus.IN_PROGRESS


def requirement_statuses(progress: RevalidationProgress) -> dict[str, RequirementStatus]:
    return {c.name: requirement_status(c) for c in progress.categories()}
