from __future__ import annotations

from datetime import date

import pytest

from revalpro.models.records import (
    CpdRecord,
    HealthDeclaration,
    PracticeHoursRecord,
    RecordValidationError,
    UserProfile,
    decode_record,
)

PRACTICE = {
    "start_date": "2026-01-05",
    "end_date": "2026-03-29",
    "hours": "412.5",
    "work_setting": "Acute ward",
    "scope": "Adult nursing",
    "registration": "Registered Nurse",
}


def test_hours_are_coerced_to_float() -> None:
    record = PracticeHoursRecord.from_dict(PRACTICE)
    assert record.hours == 412.5
    assert record.start_date == date(2026, 1, 5)


@pytest.mark.parametrize("bad", ["NaN", "inf", "-Infinity", -1, "", None, True, "six"])
def test_poisonous_hours_are_rejected(bad: object) -> None:
    with pytest.raises(RecordValidationError) as exc:
        PracticeHoursRecord.from_dict({**PRACTICE, "hours": bad})
    assert exc.value.kind == "practice_hours"


def test_zero_hours_allowed() -> None:
    assert PracticeHoursRecord.from_dict({**PRACTICE, "hours": 0}).hours == 0.0


def test_bad_date_rejected() -> None:
    with pytest.raises(RecordValidationError, match="start_date must be an ISO date"):
        PracticeHoursRecord.from_dict({**PRACTICE, "start_date": "05/01/2026"})


def test_participatory_must_be_boolean() -> None:
    with pytest.raises(RecordValidationError, match="participatory must be a boolean"):
        CpdRecord.from_dict(
            {"date": "2026-02-01", "title": "x", "hours": 1, "participatory": "yes"}
        )


def test_to_dict_serialises_dates() -> None:
    record = CpdRecord(date=date(2026, 2, 1), title="x", hours=1.5, participatory=False)
    assert record.to_dict()["date"] == "2026-02-01"
    assert CpdRecord.from_dict(record.to_dict()) == record


def test_health_declaration_accepts_empty_payload() -> None:
    assert HealthDeclaration.from_dict({}) == HealthDeclaration()


def test_profile_expiry_optional() -> None:
    profile = UserProfile.from_dict({"name": "Sam"})
    assert profile.expiry_date is None


def test_decode_record_rejects_unknown_kind_and_non_objects() -> None:
    with pytest.raises(RecordValidationError, match="unknown record kind"):
        decode_record("documents", {})
    with pytest.raises(RecordValidationError, match="must be an object"):
        decode_record("cpd", ["not", "a", "dict"])  # type: ignore[arg-type]
