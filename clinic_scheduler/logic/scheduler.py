# logic/scheduler.py
from __future__ import annotations
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from clinic_scheduler.config import WEDNESDAY
from clinic_scheduler.logic.counters import yearly_seed
from clinic_scheduler.models.person import Constraint, Person
from clinic_scheduler.models.schedule import SLOTS, UNASSIGNED, slot_key
from clinic_scheduler.models.state import ScheduleState
from clinic_scheduler.utils.date_helper import duty_dates

logger = logging.getLogger(__name__)


@dataclass
class GenerationReport:
    year: int
    month: int
    dates: List[str] = field(default_factory=list)         # 배정한 당직일
    holidays: List[str] = field(default_factory=list)      # 휴일이라 건너뛴 날
    unassigned: List[str] = field(default_factory=list)    # 가능 인원이 없던 slot key
    tally: Dict[int, int] = field(default_factory=dict)    # 이번 실행의 1인당 배정 수

    @property
    def assigned_count(self) -> int:
        return len(self.dates) * len(SLOTS) - len(self.unassigned)


def available_people(roster: Sequence[Person], constraints: Iterable[Constraint],
                     date_key: str, slot: str) -> List[Person]:
    """해당 날짜/slot에 근무 불가 제약이 없는 사람(명단 순서 유지)"""
    blocked = {c.person_id for c in constraints if c.date == date_key and c.slot == slot}
    return [p for p in roster if p.id not in blocked]


def under_cap(people: Sequence[Person], tally: Dict[int, int]) -> List[Person]:
    """이번 실행에서 한도(limit)에 도달하지 않은 사람만"""
    return [p for p in people if tally.get(p.id, 0) < p.limit]


def rank(people: Sequence[Person], tally: Dict[int, int],
         seed: Optional[Dict[int, int]] = None) -> List[Person]:
    """
    공정성 정렬: (이번 실행 배정 수, [연간 시드], 이름) 오름차순.
    첫 번째 사람이 배정된다.
    """
    if seed is None:
        return sorted(people, key=lambda p: (tally.get(p.id, 0), p.name))
    return sorted(people, key=lambda p: (tally.get(p.id, 0), seed.get(p.id, 0), p.name))


def generate_month(state: ScheduleState, year: int, month: int,
                   policy: str = "yearly", weekday: int = WEDNESDAY) -> GenerationReport:
    """
    한 달 치 당직 재배정(state.schedule을 제자리에서 수정).
    - 휴일: 그 날의 AM/PM 항목 삭제 후 건너뜀
    - 그 외: AM → PM 순서로 (가능 인원 → 한도 필터 → 공정성 정렬) 첫 사람 배정
    - 가능 인원이 없으면 "Unassigned"
    - 대상 달의 기존 배정은 모두 다시 계산됨
    """
    tally = defaultdict(int)
    for p in state.roster:
        tally[p.id] = 0

    seed = yearly_seed(state.roster, state.schedule, year, month) if policy == "yearly" else None

    report = GenerationReport(year, month)
    for date_key in duty_dates(year, month, weekday):
        if state.is_holiday(date_key):
            for slot in SLOTS:
                state.schedule.pop(slot_key(date_key, slot), None)
            report.holidays.append(date_key)
            continue

        report.dates.append(date_key)
        for slot in SLOTS:
            key = slot_key(date_key, slot)
            eligible = under_cap(available_people(state.roster, state.constraints, date_key, slot), tally)
            if not eligible:
                state.schedule[key] = UNASSIGNED
                report.unassigned.append(key)
                continue
            selected = rank(eligible, tally, seed)[0]
            state.schedule[key] = selected.id
            tally[selected.id] += 1

    report.tally = dict(tally)
    logger.info(
        "generated %04d-%02d (%s): %d dates, %d assigned, %d unassigned, %d holidays skipped",
        year, month, policy, len(report.dates), report.assigned_count,
        len(report.unassigned), len(report.holidays),
    )
    return report
