from __future__ import annotations

from datetime import UTC, datetime

from mindspace._redact import redact_for_log
from mindspace.models import UserData


def _data() -> UserData:
    return UserData.model_validate(
        {
            "profile": {"name": "Ada", "preferredLanguage": "en"},
            "moodHistory": [{"id": "m1", "date": "2024-01-01", "mood": "low", "score": 3, "notes": "tired"}],
            "journalEntries": [{"id": "j1", "date": "2024-01-01", "content": "private thoughts", "tags": ["work"]}],
            "cbtProgress": {
                "thoughtRecords": [{"id": "t1", "date": "2024-01-01", "situation": "Exam", "evidenceFor": ""}],
                "lastActivity": datetime(2024, 1, 1, 8, 0, tzinfo=UTC),
            },
            "goals": [{"id": "g1", "title": "Meditate", "category": "wellness"}],
            "crisisContacts": [{"id": "c1", "name": "Sam", "phone": "555-0100", "isEmergency": True}],
            "safetyPlan": {"warningSigns": "not sleeping"},
        }
    )


def test_personal_fields_are_masked_per_entity() -> None:
    redacted = redact_for_log(_data())

    assert redacted["profile"]["name"] == "<redacted 3 chars>"
    assert redacted["profile"]["preferredLanguage"] == "en"
    assert redacted["moodHistory"][0]["notes"] == "<redacted 5 chars>"
    assert redacted["moodHistory"][0]["score"] == 3
    assert redacted["journalEntries"][0]["content"] == "<redacted 16 chars>"
    assert redacted["journalEntries"][0]["tags"] == ["work"]
    assert redacted["journalEntries"][0]["prompt"] is None
    assert redacted["cbtProgress"]["thoughtRecords"][0]["situation"] == "<redacted 4 chars>"
    assert redacted["crisisContacts"][0]["phone"] == "<redacted 8 chars>"
    assert redacted["crisisContacts"][0]["isEmergency"] is True
    assert redacted["safetyPlan"]["warningSigns"] == "<redacted 12 chars>"


def test_empty_personal_fields_stay_empty() -> None:
    redacted = redact_for_log(_data())

    assert redacted["cbtProgress"]["thoughtRecords"][0]["evidenceFor"] == ""
    assert redacted["safetyPlan"]["safePlaces"] == ""


def test_non_personal_values_are_rendered_as_json() -> None:
    redacted = redact_for_log(_data())

    assert redacted["goals"][0]["title"] == "Meditate"
    assert redacted["goals"][0]["category"] == "wellness"
    assert redacted["cbtProgress"]["lastActivity"] == "2024-01-01T08:00:00+00:00"
    assert redacted["moodHistory"][0]["date"] == "2024-01-01"


def test_long_strings_are_truncated() -> None:
    redacted = redact_for_log(["x" * 600], max_string=10)
    assert redacted[0] == "x" * 10 + "…<truncated>"
