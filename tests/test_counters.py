from __future__ import annotations

from clinic_scheduler.logic.counters import count_table, monthly_counts, yearly_counts, yearly_seed

from tests.utils import make_state

SCHEDULE = {
    "2024-01-03_AM": "A",
    "2024-01-03_PM": "B",
    "2024-01-10_AM": "A",
    "2024-01-10_PM": "Unassigned",
    "2024-02-07_AM": "A",
    "2024-02-07_PM": "Gone",
    "2023-12-27_AM": "B",
}


def _by_name(state, counts):
    return {state.display_name(pid): n for pid, n in counts.items()}


def test_monthly_and_yearly_counts() -> None:
    state = make_state(users=[("A", 4), ("B", 4), ("C", 4)], schedule=SCHEDULE)
    assert _by_name(state, monthly_counts(state.roster, state.schedule, 2024, 1)) == {"A": 2, "B": 1, "C": 0}
    assert _by_name(state, yearly_counts(state.roster, state.schedule, 2024)) == {"A": 3, "B": 1, "C": 0}
    assert _by_name(state, yearly_counts(state.roster, state.schedule, 2023)) == {"A": 0, "B": 1, "C": 0}


def test_sentinel_and_stale_names_count_for_nobody() -> None:
    state = make_state(users=[("A", 4)], schedule=SCHEDULE)
    counts = monthly_counts(state.roster, state.schedule, 2024, 2)
    assert _by_name(state, counts) == {"A": 1}
    # the stale name is still resolvable for display
    assert state.wire_schedule()["2024-02-07_PM"] == "Gone"


def test_yearly_seed_excludes_target_month() -> None:
    state = make_state(users=[("A", 4), ("B", 4)], schedule=SCHEDULE)
    assert _by_name(state, yearly_seed(state.roster, state.schedule, 2024, 1)) == {"A": 1, "B": 0}
    assert _by_name(state, yearly_seed(state.roster, state.schedule, 2024, 2)) == {"A": 2, "B": 1}


def test_count_table_sorted_by_name() -> None:
    state = make_state(users=[("B", 2), ("A", 5)], schedule=SCHEDULE)
    rows = count_table(state, 2024, 1)
    assert [tuple(r) for r in rows] == [("A", 5, 2, 3), ("B", 2, 1, 1)]
