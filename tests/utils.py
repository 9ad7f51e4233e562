"""Fixtures and helpers for scheduler tests."""
from __future__ import annotations

import copy
from typing import Any, Dict, Iterable, List, Optional

from clinic_scheduler.config import Settings
from clinic_scheduler.exceptions import StoreError
from clinic_scheduler.logic.session import Session
from clinic_scheduler.models.mutation import Mutation
from clinic_scheduler.models.state import ScheduleState


def payload(
    users: Iterable = (),
    constraints: Iterable = (),
    schedule: Optional[Dict[str, str]] = None,
    holidays: Iterable[str] = (),
) -> Dict[str, Any]:
    """users accepts ("A", 1) tuples, constraints accepts ("A", "2024-01-03", "AM") tuples."""
    return {
        "users": [{"name": n, "limit": lim} for n, lim in users],
        "constraints": [{"user": u, "date": d, "slot": s} for u, d, s in constraints],
        "schedule": dict(schedule or {}),
        "holidays": list(holidays),
    }


def make_state(**kwargs) -> ScheduleState:
    return ScheduleState.from_payload(payload(**kwargs))


def names(state: ScheduleState) -> Dict[str, str]:
    return state.wire_schedule()


class FakeStore:
    """In-memory store; records applied mutations and can fail chosen actions."""

    def __init__(self, data: Optional[Dict[str, Any]] = None, fail_actions: Iterable[str] = (),
                 fail_fetch: bool = False):
        self.data = copy.deepcopy(data) if data is not None else payload()
        self.applied: List[Mutation] = []
        self.fail_actions = set(fail_actions)
        self.fail_fetch = fail_fetch

    def fetch_all(self) -> Dict[str, Any]:
        if self.fail_fetch:
            raise StoreError("network down")
        return copy.deepcopy(self.data)

    def apply(self, mutation: Mutation) -> None:
        if mutation.action in self.fail_actions:
            raise StoreError("lock timeout")
        self.applied.append(mutation)

    def actions(self) -> List[str]:
        return [m.action for m in self.applied]


def make_session(store: Optional[FakeStore] = None, fairness: str = "yearly", **kwargs) -> Session:
    store = store or FakeStore(payload(**kwargs))
    session = Session(store, Settings(fairness=fairness))
    session.reload()
    return session
