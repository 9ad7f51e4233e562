# models/state.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from clinic_scheduler.config import DEFAULT_LIMIT
from clinic_scheduler.models.person import Constraint, Person
from clinic_scheduler.models.schedule import UNASSIGNED, Assignment, ScheduleMap, is_valid_slot, split_key
from clinic_scheduler.utils.date_helper import format_date

logger = logging.getLogger(__name__)


@dataclass
class ScheduleState:
    """
    한 세션이 들고 있는 전체 상태.
    - 제약/스케줄은 사람 id를 참조하고, 이름은 names(id → 표시 이름)에서 찾는다.
    - names에는 삭제된 사람, 저장소에만 남은 이름(stale)도 남아 있다.
    """
    roster: List[Person] = field(default_factory=list)
    constraints: List[Constraint] = field(default_factory=list)
    holidays: List[str] = field(default_factory=list)
    schedule: ScheduleMap = field(default_factory=dict)
    names: Dict[int, str] = field(default_factory=dict)
    next_id: int = 1

    # ---------- 조회 ----------
    def person_by_name(self, name: str) -> Optional[Person]:
        return next((p for p in self.roster if p.name == name), None)

    def person_by_id(self, person_id) -> Optional[Person]:
        return next((p for p in self.roster if p.id == person_id), None)

    def roster_ids(self) -> set:
        return {p.id for p in self.roster}

    def display_name(self, value: Assignment) -> str:
        if value == UNASSIGNED:
            return UNASSIGNED
        return self.names.get(value, str(value))

    def is_holiday(self, date_key: str) -> bool:
        return date_key in self.holidays

    def constraints_for(self, person_id: int) -> List[Constraint]:
        return [c for c in self.constraints if c.person_id == person_id]

    def entries_for(self, person_id: int) -> List[str]:
        return sorted(k for k, v in self.schedule.items() if v == person_id)

    # ---------- id 관리 ----------
    def _stale_id(self, name: str) -> Optional[int]:
        current = self.roster_ids()
        return next((i for i, n in self.names.items() if n == name and i not in current), None)

    def id_of(self, name: str) -> Optional[int]:
        """등록 없이 조회만(현재 인원 우선, 없으면 stale)"""
        person = self.person_by_name(name)
        return person.id if person else self._stale_id(name)

    def register_name(self, name: str) -> int:
        """현재 인원 → 그 id, 이미 본 이름(stale) → 그 id, 처음 보는 이름 → 새 id"""
        person = self.person_by_name(name)
        if person:
            return person.id
        stale = self._stale_id(name)
        if stale is not None:
            return stale
        new_id = self.next_id
        self.next_id += 1
        self.names[new_id] = name
        return new_id

    def absorb_stale(self, name: str, person_id: int) -> Optional[int]:
        """같은 이름의 stale id가 있으면 그 제약/스케줄을 person_id로 옮기고 id를 없앤다."""
        stale = self._stale_id(name)
        if stale is None or stale == person_id:
            return None
        for key, value in self.schedule.items():
            if value == stale:
                self.schedule[key] = person_id
        self.constraints = [
            Constraint(person_id, c.date, c.slot) if c.person_id == stale else c
            for c in self.constraints
        ]
        del self.names[stale]
        return stale

    # ---------- 저장소 형식 변환 ----------
    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ScheduleState":
        """fetch-all 결과 → 상태. 빈 행/잘못된 행은 건너뛴다."""
        state = cls()

        for row in payload.get("users") or []:
            name = str(row.get("name") or "").strip()
            if not name:
                continue
            if state.person_by_name(name):
                logger.warning("duplicate user %r in store, keeping the first", name)
                continue
            person_id = state.register_name(name)
            state.roster.append(Person(person_id, name, _coerce_limit(row.get("limit"))))

        for row in payload.get("constraints") or []:
            user = str(row.get("user") or "").strip()
            date_key = format_date(row.get("date"))
            slot = row.get("slot")
            if not user:
                continue
            if not date_key or not is_valid_slot(slot):
                logger.warning("skipping malformed constraint %r", row)
                continue
            state.constraints.append(Constraint(state.register_name(user), date_key, slot))

        for key, value in (payload.get("schedule") or {}).items():
            try:
                date_key, slot = split_key(str(key))
            except ValueError:
                logger.warning("skipping malformed schedule key %r", key)
                continue
            value = str(value or "").strip()
            if not value:
                continue
            norm_key = f"{format_date(date_key)}_{slot}"
            state.schedule[norm_key] = UNASSIGNED if value == UNASSIGNED else state.register_name(value)

        for raw in payload.get("holidays") or []:
            date_key = format_date(raw)
            if date_key and date_key not in state.holidays:
                state.holidays.append(date_key)

        return state

    def wire_schedule(self) -> Dict[str, str]:
        return {k: self.display_name(v) for k, v in self.schedule.items()}

    def to_payload(self) -> Dict[str, Any]:
        return {
            "users": [p.to_dict() for p in self.roster],
            "constraints": [
                {"user": self.display_name(c.person_id), "date": c.date, "slot": c.slot}
                for c in self.constraints
            ],
            "schedule": self.wire_schedule(),
            "holidays": list(self.holidays),
        }


def _coerce_limit(value) -> int:
    # 저장소(시트)에 비어 있거나 0이면 기본값 4
    try:
        limit = int(float(value))
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    return limit if limit >= 1 else DEFAULT_LIMIT
