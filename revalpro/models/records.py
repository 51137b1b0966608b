"""Revalidation evidence records.

Each record type carries a ``kind`` tag used as its collection name in the
key-value store.  ``from_dict`` is the persistence boundary: stored or
submitted payloads are validated there, numeric fields are coerced, and
anything that would poison an aggregate (NaN, infinity, negative hours)
raises RecordValidationError instead of flowing into progress sums.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, fields
from datetime import date
from typing import Any, ClassVar


class RecordValidationError(ValueError):
    def __init__(self, kind: str, message: str) -> None:
        super().__init__(f"{kind}: {message}")
        self.kind = kind


def _require(kind: str, data: dict, key: str) -> Any:
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise RecordValidationError(kind, f"{key} is required")
    return value


def _hours(kind: str, data: dict, key: str = "hours") -> float:
    raw = _require(kind, data, key)
    if isinstance(raw, bool):
        raise RecordValidationError(kind, f"{key} must be a number")
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise RecordValidationError(kind, f"{key} must be a number") from None
    if not math.isfinite(value):
        raise RecordValidationError(kind, f"{key} must be finite")
    if value < 0:
        raise RecordValidationError(kind, f"{key} must not be negative")
    return value


def _date(kind: str, data: dict, key: str, *, required: bool = True) -> date | None:
    raw = data.get(key)
    if raw is None or raw == "":
        if required:
            raise RecordValidationError(kind, f"{key} is required")
        return None
    if isinstance(raw, date):
        return raw
    try:
        return date.fromisoformat(str(raw)[:10])
    except ValueError:
        raise RecordValidationError(kind, f"{key} must be an ISO date") from None


def _bool(kind: str, data: dict, key: str, default: bool | None = None) -> bool | None:
    raw = data.get(key, default)
    if raw is None or isinstance(raw, bool):
        return raw
    raise RecordValidationError(kind, f"{key} must be a boolean")


def _text(data: dict, key: str) -> str | None:
    raw = data.get(key)
    return None if raw is None else str(raw)


class _Record:
    """Shared serialisation for the record dataclasses."""

    kind: ClassVar[str]

    def to_dict(self) -> dict:
        out = asdict(self)  # type: ignore[call-overload]
        for key, value in out.items():
            if isinstance(value, date):
                out[key] = value.isoformat()
        return out

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class PracticeHoursRecord(_Record):
    kind: ClassVar[str] = "practice_hours"

    start_date: date
    end_date: date
    hours: float
    work_setting: str
    scope: str
    registration: str
    notes: str | None = None
    weekly_config_id: int | None = None
    id: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> PracticeHoursRecord:
        k = cls.kind
        start = _date(k, data, "start_date")
        end = _date(k, data, "end_date")
        if start and end and end < start:
            raise RecordValidationError(k, "end_date must not precede start_date")
        return cls(
            id=data.get("id"),
            start_date=start,  # type: ignore[arg-type]
            end_date=end,  # type: ignore[arg-type]
            hours=_hours(k, data),
            work_setting=str(_require(k, data, "work_setting")),
            scope=str(_require(k, data, "scope")),
            registration=str(_require(k, data, "registration")),
            notes=_text(data, "notes"),
            weekly_config_id=data.get("weekly_config_id"),
        )


@dataclass(frozen=True, slots=True)
class CpdRecord(_Record):
    kind: ClassVar[str] = "cpd"

    date: date
    title: str
    hours: float
    participatory: bool
    description: str | None = None
    relevance_to_code: str | None = None
    id: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> CpdRecord:
        k = cls.kind
        return cls(
            id=data.get("id"),
            date=_date(k, data, "date"),  # type: ignore[arg-type]
            title=str(_require(k, data, "title")),
            hours=_hours(k, data),
            participatory=bool(_bool(k, data, "participatory", False)),
            description=_text(data, "description"),
            relevance_to_code=_text(data, "relevance_to_code"),
        )


@dataclass(frozen=True, slots=True)
class FeedbackRecord(_Record):
    kind: ClassVar[str] = "feedback"

    date: date
    source: str
    content: str
    reflection: str | None = None
    id: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> FeedbackRecord:
        k = cls.kind
        return cls(
            id=data.get("id"),
            date=_date(k, data, "date"),  # type: ignore[arg-type]
            source=str(_require(k, data, "source")),
            content=str(_require(k, data, "content")),
            reflection=_text(data, "reflection"),
        )


@dataclass(frozen=True, slots=True)
class ReflectiveAccount(_Record):
    kind: ClassVar[str] = "reflections"

    date: date
    title: str
    experience: str
    what_learned: str
    how_changed: str
    code_relation: str
    reflective_model: str = "Standard"
    id: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ReflectiveAccount:
        k = cls.kind
        return cls(
            id=data.get("id"),
            date=_date(k, data, "date"),  # type: ignore[arg-type]
            title=str(_require(k, data, "title")),
            experience=str(_require(k, data, "experience")),
            what_learned=str(_require(k, data, "what_learned")),
            how_changed=str(_require(k, data, "how_changed")),
            code_relation=str(_require(k, data, "code_relation")),
            reflective_model=str(data.get("reflective_model") or "Standard"),
        )


@dataclass(frozen=True, slots=True)
class ReflectiveDiscussion(_Record):
    kind: ClassVar[str] = "reflective_discussion"

    date: date
    partner_name: str
    partner_nmc_pin: str
    completed: bool = False
    notes: str | None = None
    id: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> ReflectiveDiscussion:
        k = cls.kind
        return cls(
            id=data.get("id"),
            date=_date(k, data, "date"),  # type: ignore[arg-type]
            partner_name=str(_require(k, data, "partner_name")),
            partner_nmc_pin=str(_require(k, data, "partner_nmc_pin")),
            completed=bool(_bool(k, data, "completed", False)),
            notes=_text(data, "notes"),
        )


@dataclass(frozen=True, slots=True)
class HealthDeclaration(_Record):
    kind: ClassVar[str] = "health_declaration"

    good_health: bool | None = None
    health_changes: str | None = None
    good_character: bool | None = None
    character_changes: str | None = None
    completed: bool = False
    id: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> HealthDeclaration:
        k = cls.kind
        return cls(
            id=data.get("id"),
            good_health=_bool(k, data, "good_health"),
            health_changes=_text(data, "health_changes"),
            good_character=_bool(k, data, "good_character"),
            character_changes=_text(data, "character_changes"),
            completed=bool(_bool(k, data, "completed", False)),
        )


@dataclass(frozen=True, slots=True)
class Confirmation(_Record):
    kind: ClassVar[str] = "confirmation"

    confirmer_name: str
    confirmer_relationship: str
    confirmer_email: str | None = None
    confirmer_nmc_pin: str | None = None
    confirmation_date: date | None = None
    completed: bool = False
    id: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> Confirmation:
        k = cls.kind
        return cls(
            id=data.get("id"),
            confirmer_name=str(_require(k, data, "confirmer_name")),
            confirmer_relationship=str(_require(k, data, "confirmer_relationship")),
            confirmer_email=_text(data, "confirmer_email"),
            confirmer_nmc_pin=_text(data, "confirmer_nmc_pin"),
            confirmation_date=_date(k, data, "confirmation_date", required=False),
            completed=bool(_bool(k, data, "completed", False)),
        )


@dataclass(frozen=True, slots=True)
class UserProfile(_Record):
    kind: ClassVar[str] = "profile"

    name: str
    registration_number: str | None = None
    expiry_date: date | None = None
    job_title: str | None = None
    id: int | None = None

    @classmethod
    def from_dict(cls, data: dict) -> UserProfile:
        k = cls.kind
        return cls(
            id=data.get("id"),
            name=str(_require(k, data, "name")),
            registration_number=_text(data, "registration_number"),
            expiry_date=_date(k, data, "expiry_date", required=False),
            job_title=_text(data, "job_title"),
        )


RECORD_TYPES: dict[str, type] = {
    t.kind: t
    for t in (
        PracticeHoursRecord,
        CpdRecord,
        FeedbackRecord,
        ReflectiveAccount,
        ReflectiveDiscussion,
        HealthDeclaration,
        Confirmation,
        UserProfile,
    )
}


def decode_record(kind: str, data: dict) -> Any:
    """Validate a raw payload for ``kind`` and return the typed record."""
    record_type = RECORD_TYPES.get(kind)
    if record_type is None:
        raise RecordValidationError(kind, "unknown record kind")
    if not isinstance(data, dict):
        raise RecordValidationError(kind, "record must be an object")
    return record_type.from_dict(data)
