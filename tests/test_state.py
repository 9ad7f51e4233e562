from __future__ import annotations

from datetime import date

import pytest

from clinic_scheduler.models.schedule import UNASSIGNED, split_key
from clinic_scheduler.models.state import ScheduleState


def test_payload_normalization() -> None:
    state = ScheduleState.from_payload({
        "users": [
            {"name": "Dr. A", "limit": 2},
            {"name": "Dr. B", "limit": ""},
            {"name": "Dr. C", "limit": 0},
            {"name": "", "limit": 3},
            {"name": "Dr. A", "limit": 9},
        ],
        "constraints": [
            {"user": "Dr. A", "date": date(2024, 1, 3), "slot": "AM"},
            {"user": "Dr. B", "date": "2024-01-03T00:00:00.000Z", "slot": "PM"},
            {"user": "Dr. B", "date": "2024-01-03", "slot": "EVENING"},
            {"user": "", "date": "2024-01-03", "slot": "AM"},
        ],
        "schedule": {
            "2024-01-03_AM": "Dr. A",
            "2024-01-03_PM": UNASSIGNED,
            "2024-01-10_AM": "Dr. Gone",
            "garbage": "Dr. A",
            "2024-01-10_PM": "",
        },
        "holidays": ["2024-12-25", date(2024, 12, 25), "", "2024-01-01"],
    })

    assert [(p.name, p.limit) for p in state.roster] == [("Dr. A", 2), ("Dr. B", 4), ("Dr. C", 4)]
    assert [(state.display_name(c.person_id), c.date, c.slot) for c in state.constraints] == [
        ("Dr. A", "2024-01-03", "AM"),
        ("Dr. B", "2024-01-03", "PM"),
    ]
    assert state.wire_schedule() == {
        "2024-01-03_AM": "Dr. A",
        "2024-01-03_PM": UNASSIGNED,
        "2024-01-10_AM": "Dr. Gone",
    }
    assert state.holidays == ["2024-12-25", "2024-01-01"]


def test_stale_names_get_ids_outside_roster() -> None:
    state = ScheduleState.from_payload({"users": [{"name": "A", "limit": 1}],
                                        "schedule": {"2024-01-03_AM": "Old"}})
    stale = state.schedule["2024-01-03_AM"]
    assert stale not in state.roster_ids()
    assert state.id_of("Old") == stale
    assert state.register_name("Old") == stale
    assert state.id_of("Never seen") is None


def test_payload_round_trip() -> None:
    data = {
        "users": [{"name": "A", "limit": 2}, {"name": "B", "limit": 1}],
        "constraints": [{"user": "B", "date": "2024-01-03", "slot": "AM"}],
        "schedule": {"2024-01-03_AM": "A", "2024-01-03_PM": UNASSIGNED},
        "holidays": ["2024-01-17"],
    }
    assert ScheduleState.from_payload(data).to_payload() == data


def test_split_key() -> None:
    assert split_key("2024-01-03_PM") == ("2024-01-03", "PM")
    with pytest.raises(ValueError):
        split_key("2024-01-03")
    with pytest.raises(ValueError):
        split_key("2024-01-03_NOON")
