from __future__ import annotations

from datetime import date

import pytest

from clinic_scheduler.config import Settings
from clinic_scheduler.exceptions import ConflictError, StoreError, ValidationError
from clinic_scheduler.logic.counters import count_table
from clinic_scheduler.logic.session import Session
from clinic_scheduler.models.schedule import UNASSIGNED
from clinic_scheduler.models.state import ScheduleState

from tests.utils import FakeStore, make_session, payload


def test_add_user_validation_and_conflict() -> None:
    session = make_session(users=[("A", 4)])
    for bad_name, bad_limit in [("", 4), ("   ", 4), ("B", 0), ("B", -1), ("B", "x"), ("B", True)]:
        with pytest.raises(ValidationError):
            session.add_user(bad_name, bad_limit)
    with pytest.raises(ConflictError):
        session.add_user("A", 2)
    # the store cannot tell this name from an empty slot
    with pytest.raises(ValidationError):
        session.add_user(UNASSIGNED, 2)
    with pytest.raises(ValidationError):
        session.edit_user("A", f" {UNASSIGNED} ", 2)
    assert [p.name for p in session.state.roster] == ["A"]
    assert session.sync.pending == []


def test_add_user_emits_change() -> None:
    session = make_session()
    mutations = session.add_user(" Dr. A ", "3")
    assert [m.to_dict() for m in mutations] == [{"action": "addUser", "name": "Dr. A", "limit": 3}]
    assert session.state.person_by_name("Dr. A").limit == 3


def test_rename_cascades_to_constraints_and_schedule() -> None:
    session = make_session(
        users=[("A", 4), ("B", 4)],
        constraints=[("A", "2024-01-03", "AM")],
        schedule={"2024-01-03_PM": "A", "2024-01-10_AM": "A", "2024-01-10_PM": "B"},
    )
    before = {r.name: (r.month, r.year) for r in session.count_table(2024, 1)}

    mutations = session.edit_user("A", "Z", 5)

    assert [m.action for m in mutations] == [
        "editUser", "removeConstraint", "addConstraint", "saveSchedule",
    ]
    assert mutations[0].payload == {"oldName": "A", "newName": "Z", "newLimit": 5}
    assert mutations[2].payload == {"user": "Z", "date": "2024-01-03", "slot": "AM"}
    assert session.constraint_rows() == [("Z", "2024-01-03", "AM")]
    schedule = session.schedule_names()
    assert schedule["2024-01-03_PM"] == "Z"
    assert schedule["2024-01-10_AM"] == "Z"
    assert "A" not in schedule.values()
    after = {r.name: (r.month, r.year) for r in session.count_table(2024, 1)}
    assert after["Z"] == before["A"]
    assert session.state.person_by_name("Z").limit == 5


def test_edit_user_rules() -> None:
    session = make_session(users=[("A", 4), ("B", 4)])
    assert session.edit_user("nobody", "C", 1) == []
    with pytest.raises(ConflictError):
        session.edit_user("A", "B", 4)
    with pytest.raises(ValidationError):
        session.edit_user("A", "", 4)
    with pytest.raises(ValidationError):
        session.edit_user("A", "A", 0)
    # limit-only edit does not resend constraints or schedule
    assert [m.action for m in session.edit_user("A", "A", 2)] == ["editUser"]


def test_delete_user_removes_constraints_keeps_schedule() -> None:
    session = make_session(
        users=[("A", 4), ("B", 4)],
        constraints=[("A", "2024-01-03", "AM"), ("A", "2024-01-10", "PM"), ("B", "2024-01-03", "PM")],
        schedule={"2024-01-03_PM": "A"},
    )
    mutations = session.delete_user("A")
    assert [m.action for m in mutations] == ["deleteUser", "removeConstraint", "removeConstraint"]
    assert session.constraint_rows() == [("B", "2024-01-03", "PM")]
    # dangling entry tolerated: still shown, counted for nobody
    assert session.schedule_names()["2024-01-03_PM"] == "A"
    assert [r.name for r in session.count_table(2024, 1)] == ["B"]
    assert session.delete_user("A") == []


def test_re_adding_a_deleted_name_picks_up_old_entries() -> None:
    session = make_session(users=[("A", 4)], schedule={"2024-01-03_PM": "A"})
    session.delete_user("A")
    session.add_user("A", 4)
    rows = session.count_table(2024, 1)
    assert [(r.name, r.month) for r in rows] == [("A", 1)]


def test_rename_onto_a_stale_name_merges_its_entries() -> None:
    session = make_session(
        users=[("A", 4)],
        constraints=[("Gone", "2024-01-24", "PM")],
        schedule={"2024-01-03_AM": "A", "2024-01-10_AM": "Gone", "2024-01-17_AM": "Gone"},
    )
    mutations = session.edit_user("A", "Gone", 4)

    # stale constraints already carry the new name in the store
    assert [m.action for m in mutations] == ["editUser", "saveSchedule"]
    assert list(session.state.names.values()).count("Gone") == 1
    local = {r.name: (r.month, r.year) for r in session.count_table(2024, 1)}
    assert local == {"Gone": (3, 3)}
    assert session.constraint_rows() == [("Gone", "2024-01-24", "PM")]

    reloaded = ScheduleState.from_payload(session.state.to_payload())
    assert {r.name: (r.month, r.year) for r in count_table(reloaded, 2024, 1)} == local


def test_add_constraint_validation() -> None:
    session = make_session(users=[("A", 4)])
    with pytest.raises(ValidationError):
        session.add_constraint("", "2024-01-03", ["AM"])
    with pytest.raises(ValidationError):
        session.add_constraint("Nobody", "2024-01-03", ["AM"])
    with pytest.raises(ValidationError):
        session.add_constraint("A", "", ["AM"])
    with pytest.raises(ValidationError):
        session.add_constraint("A", "2024-13-40", ["AM"])
    with pytest.raises(ValidationError):
        session.add_constraint("A", "2024-01-03", [])
    with pytest.raises(ValidationError):
        session.add_constraint("A", "2024-01-03", ["NOON"])
    assert session.state.constraints == []


def test_add_constraint_both_slots_accepts_date_objects() -> None:
    session = make_session(users=[("A", 4)])
    mutations = session.add_constraint("A", date(2024, 1, 3), ["PM", "AM"])
    assert [m.payload["slot"] for m in mutations] == ["AM", "PM"]
    assert session.constraint_rows() == [("A", "2024-01-03", "AM"), ("A", "2024-01-03", "PM")]


def test_remove_constraint_removes_one_duplicate() -> None:
    session = make_session(
        users=[("A", 4)],
        constraints=[("A", "2024-01-03", "AM"), ("A", "2024-01-03", "AM")],
    )
    assert len(session.remove_constraint("A", "2024-01-03", "AM")) == 1
    assert session.constraint_rows() == [("A", "2024-01-03", "AM")]
    session.remove_constraint("A", "2024-01-03", "AM")
    assert session.constraint_rows() == []
    assert session.remove_constraint("A", "2024-01-03", "AM") == []
    assert session.remove_constraint("Nobody", "2024-01-03", "AM") == []


def test_holiday_clears_entries_and_regeneration_skips_it() -> None:
    session = make_session(users=[("A", 4)])
    session.generate(2024, 1)
    assert session.schedule_names()["2024-01-03_AM"] == "A"

    mutations = session.add_holiday("2024-01-03")
    assert [m.action for m in mutations] == ["addHoliday", "saveSchedule"]
    assert "2024-01-03_AM" not in mutations[1].payload["schedule"]
    assert "2024-01-03_AM" not in session.state.schedule
    assert session.add_holiday("2024-01-03") == []

    session.generate(2024, 1)
    assert "2024-01-03_AM" not in session.state.schedule
    assert "2024-01-03_PM" not in session.state.schedule

    assert [m.action for m in session.toggle_holiday("2024-01-03")] == ["removeHoliday"]
    assert session.remove_holiday("2024-01-03") == []


def test_holiday_without_entries_only_adds_holiday() -> None:
    session = make_session()
    assert [m.action for m in session.add_holiday("2024-01-03")] == ["addHoliday"]
    with pytest.raises(ValidationError):
        session.add_holiday("someday")


def test_generate_saves_whole_map() -> None:
    session = make_session(
        users=[("A", 1), ("B", 1)],
        schedule={"2023-11-01_AM": "B"},
    )
    mutations = session.generate(2024, 1)
    assert [m.action for m in mutations] == ["saveSchedule"]
    saved = mutations[0].payload["schedule"]
    assert saved["2023-11-01_AM"] == "B"
    assert saved["2024-01-03_AM"] == "A"
    assert saved["2024-01-03_PM"] == "B"
    assert saved["2024-01-10_AM"] == UNASSIGNED
    with pytest.raises(ValidationError):
        session.generate(2024, 13)
    with pytest.raises(ValidationError):
        session.generate(2024, 1, policy="random")


def test_store_failure_keeps_optimistic_state() -> None:
    store = FakeStore(payload(users=[("A", 4)]), fail_actions=["addUser"])
    session = make_session(store)
    session.add_user("B", 2)
    session.add_holiday("2024-01-03")
    failures = session.flush()

    assert [f.mutation.action for f in failures] == ["addUser"]
    assert store.actions() == ["addHoliday"]
    assert session.diverged
    assert session.state.person_by_name("B") is not None

    # a later flush has nothing left to resend
    assert session.flush() == []

    session.reload()
    assert not session.diverged
    assert session.state.person_by_name("B") is None


def test_flush_sends_in_order() -> None:
    store = FakeStore()
    session = make_session(store)
    session.add_user("A", 4)
    session.add_constraint("A", "2024-01-03", "AM")
    session.generate(2024, 1)
    assert session.flush() == []
    assert store.actions() == ["addUser", "addConstraint", "saveSchedule"]
    assert not session.diverged


def test_open_with_unreachable_store_starts_empty(monkeypatch) -> None:
    store = FakeStore(fail_fetch=True)
    monkeypatch.setattr("clinic_scheduler.logic.session.open_store", lambda settings: store)
    session = Session.open(Settings())
    assert session.state.roster == []
    assert session.diverged
    # still accepts actions
    session.add_user("A", 1)
    assert session.state.person_by_name("A") is not None


def test_unloaded_session_never_overwrites_the_stored_schedule(monkeypatch) -> None:
    store = FakeStore(payload(users=[("A", 1)],
                              schedule={"2023-06-07_AM": "A", "2024-02-07_AM": "A"}),
                      fail_fetch=True)
    monkeypatch.setattr("clinic_scheduler.logic.session.open_store", lambda settings: store)
    session = Session.open(Settings())
    assert not session.loaded
    with pytest.raises(StoreError):
        session.reload()

    session.add_user("B", 1)
    with pytest.raises(StoreError):
        session.generate(2024, 1)
    assert session.state.schedule == {}
    session.flush()
    assert store.actions() == ["addUser"]

    store.fail_fetch = False
    session.reload()
    assert session.loaded
    saved = session.generate(2024, 1)[0].payload["schedule"]
    assert saved["2023-06-07_AM"] == "A"
    assert saved["2024-02-07_AM"] == "A"
