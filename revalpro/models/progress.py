from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum

from revalpro.models.records import (
    Confirmation,
    CpdRecord,
    FeedbackRecord,
    HealthDeclaration,
    PracticeHoursRecord,
    ReflectiveAccount,
    ReflectiveDiscussion,
    UserProfile,
)


class RevalidationStatus(StrEnum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    ATTENTION = "ATTENTION"


class RequirementStatus(StrEnum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ATTENTION_NEEDED = "attention_needed"


@dataclass(frozen=True, slots=True)
class ProgressCategory:
    """Completion of one NMC requirement against its static threshold."""

    name: str
    required: float
    completed: float
    percentage: float
    binary: bool = False


@dataclass(frozen=True, slots=True)
class RevalidationProgress:
    """Derived view over a user's records; recomputed on every read."""

    practice_hours: ProgressCategory
    cpd: ProgressCategory
    participatory_cpd: ProgressCategory
    feedback: ProgressCategory
    reflective_accounts: ProgressCategory
    reflective_discussion: ProgressCategory
    health_declaration: ProgressCategory
    confirmation: ProgressCategory
    overall_percentage: int
    status: RevalidationStatus
    days_remaining: int | None = None
    timeline_percent: float | None = None

    def categories(self) -> list[ProgressCategory]:
        return [
            self.practice_hours,
            self.cpd,
            self.participatory_cpd,
            self.feedback,
            self.reflective_accounts,
            self.reflective_discussion,
            self.health_declaration,
            self.confirmation,
        ]


@dataclass(frozen=True, slots=True)
class RevalidationSummaryData:
    """Aggregator input: every record collection plus the registration facts."""

    practice_hours: list[PracticeHoursRecord] = field(default_factory=list)
    cpd_records: list[CpdRecord] = field(default_factory=list)
    feedback_records: list[FeedbackRecord] = field(default_factory=list)
    reflective_accounts: list[ReflectiveAccount] = field(default_factory=list)
    reflective_discussion: ReflectiveDiscussion | None = None
    health_declaration: HealthDeclaration | None = None
    confirmation: Confirmation | None = None
    expiry_date: date | None = None
    registration: str | None = None

    @property
    def has_health_declaration(self) -> bool:
        return self.health_declaration is not None

    @property
    def has_confirmation(self) -> bool:
        return self.confirmation is not None

    @property
    def has_reflective_discussion(self) -> bool:
        return self.reflective_discussion is not None

    @staticmethod
    def from_profile(profile: UserProfile | None, **collections) -> RevalidationSummaryData:
        return RevalidationSummaryData(
            expiry_date=profile.expiry_date if profile else None,
            **collections,
        )
