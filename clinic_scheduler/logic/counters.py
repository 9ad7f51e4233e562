# logic/counters.py
from collections import Counter
from typing import Dict, List, NamedTuple, Sequence

from clinic_scheduler.models.person import Person
from clinic_scheduler.models.schedule import ScheduleMap
from clinic_scheduler.utils.date_helper import in_month, in_year


class CountRow(NamedTuple):
    name: str
    limit: int
    month: int
    year: int


def _count(roster: Sequence[Person], schedule: ScheduleMap, keep) -> Dict[int, int]:
    # "Unassigned"와 명단에 없는 id(삭제/stale)는 세지 않는다
    current = {p.id for p in roster}
    hits = Counter(v for k, v in schedule.items() if v in current and keep(k))
    return {p.id: hits.get(p.id, 0) for p in roster}


def monthly_counts(roster: Sequence[Person], schedule: ScheduleMap, year: int, month: int) -> Dict[int, int]:
    return _count(roster, schedule, lambda key: in_month(key, year, month))


def yearly_counts(roster: Sequence[Person], schedule: ScheduleMap, year: int) -> Dict[int, int]:
    return _count(roster, schedule, lambda key: in_year(key, year))


def yearly_seed(roster: Sequence[Person], schedule: ScheduleMap, year: int, month: int) -> Dict[int, int]:
    """같은 해, 대상 달을 제외한 배정 수(공정성 시드)"""
    return _count(roster, schedule, lambda key: in_year(key, year) and not in_month(key, year, month))


def count_table(state, year: int, month: int) -> List[CountRow]:
    """표시용: 이름순 (이름, 한도, 월간, 연간)"""
    monthly = monthly_counts(state.roster, state.schedule, year, month)
    yearly = yearly_counts(state.roster, state.schedule, year)
    return [
        CountRow(p.name, p.limit, monthly[p.id], yearly[p.id])
        for p in sorted(state.roster, key=lambda p: p.name)
    ]
