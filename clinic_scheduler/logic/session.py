# logic/session.py
from __future__ import annotations
import logging
from typing import Iterable, List, Optional, Union

from clinic_scheduler.config import FAIRNESS_POLICIES, Settings
from clinic_scheduler.data.store import Store, open_store
from clinic_scheduler.data.sync import SyncFailure, SyncQueue
from clinic_scheduler.exceptions import ConflictError, StoreError, ValidationError
from clinic_scheduler.logic.counters import CountRow, count_table
from clinic_scheduler.logic.scheduler import GenerationReport, generate_month
from clinic_scheduler.models.mutation import Mutation
from clinic_scheduler.models.person import Constraint, Person
from clinic_scheduler.models.schedule import SLOTS, UNASSIGNED, slot_key
from clinic_scheduler.models.state import ScheduleState
from clinic_scheduler.utils.date_helper import format_date, parse_date_key

logger = logging.getLogger(__name__)


class Session:
    """
    클라이언트 한 개의 상태 + 조작.
    모든 조작은 (1) 로컬 상태에 즉시 반영하고 (2) 저장소에 보낼 변경 목록을 큐에 넣은 뒤 반환한다.
    실제 전송은 flush()가 담당한다. 전송 실패 시 로컬은 그대로(diverged) → reload()로 맞춘다.
    - 검증 오류(ValidationError)/중복(ConflictError)은 상태를 바꾸기 전에 발생
    - 대상이 없는 수정/삭제는 조용히 무시(빈 목록 반환)
    """

    def __init__(self, store: Store, settings: Optional[Settings] = None,
                 state: Optional[ScheduleState] = None):
        self.store = store
        self.settings = settings or Settings()
        self.state = state or ScheduleState()
        self.sync = SyncQueue(store)
        self.last_report: Optional[GenerationReport] = None
        # 저장소 내용을 한 번이라도 받았는지. 아니면 전체 스케줄 교체(saveSchedule) 금지
        self.loaded = state is not None

    @classmethod
    def open(cls, settings: Settings) -> "Session":
        """저장소를 열고 전체 데이터를 불러온다. 불러오기에 실패해도 빈 상태로 계속."""
        session = cls(open_store(settings), settings)
        try:
            session.reload()
        except StoreError as e:
            logger.error("initial load failed, starting empty: %s", e)
            session.sync.diverged = True
        return session

    # ---------- 동기화 ----------
    @property
    def diverged(self) -> bool:
        return self.sync.diverged

    def reload(self) -> None:
        payload = self.store.fetch_all()
        self.state = ScheduleState.from_payload(payload)
        self.sync.reset()
        self.loaded = True
        logger.info("loaded %d users, %d constraints, %d schedule entries, %d holidays",
                    len(self.state.roster), len(self.state.constraints),
                    len(self.state.schedule), len(self.state.holidays))

    def flush(self) -> List[SyncFailure]:
        return self.sync.flush()

    def _commit(self, mutations: List[Mutation]) -> List[Mutation]:
        self.sync.push(mutations)
        return mutations

    def _require_loaded(self) -> None:
        # 빈 상태로 saveSchedule을 보내면 저장소의 다른 달 일정까지 지워진다
        if not self.loaded:
            raise StoreError("저장소를 불러오지 못했습니다. '다시 불러오기' 후 진행해주세요.")

    # ---------- 인원 ----------
    def add_user(self, name: str, limit) -> List[Mutation]:
        name = _require_name(name)
        limit = _require_limit(limit)
        if self.state.person_by_name(name):
            raise ConflictError(f"이미 있는 이름입니다: {name}")

        # 삭제됐던 같은 이름이 스케줄에 남아 있으면 그 id를 이어받는다(다시 불러온 결과와 동일)
        person_id = self.state.register_name(name)
        self.state.names[person_id] = name
        self.state.roster.append(Person(person_id, name, limit))
        return self._commit([Mutation("addUser", {"name": name, "limit": limit})])

    def edit_user(self, old_name: str, new_name: str, new_limit) -> List[Mutation]:
        person = self.state.person_by_name(old_name)
        if person is None:
            return []
        new_name = _require_name(new_name)
        new_limit = _require_limit(new_limit)
        if new_name != old_name and self.state.person_by_name(new_name):
            raise ConflictError(f"이미 있는 이름입니다: {new_name}")
        renamed = new_name != old_name
        own_constraints = self.state.constraints_for(person.id)
        has_entries = bool(self.state.entries_for(person.id))
        if renamed and has_entries:
            self._require_loaded()

        # 제약/스케줄은 id를 참조하므로 이름표만 바꾸면 된다
        person.name = new_name
        person.limit = new_limit
        self.state.names[person.id] = new_name
        if renamed:
            # 저장소에 같은 이름으로 남아 있던 항목(stale)은 다시 불러오면 이 사람 것이 된다
            self.state.absorb_stale(new_name, person.id)

        mutations = [Mutation("editUser", {"oldName": old_name, "newName": new_name, "newLimit": new_limit})]
        if renamed:
            # 저장소는 이름으로 참조하므로 제약/스케줄도 새 이름으로 다시 보낸다
            for c in own_constraints:
                mutations.append(Mutation("removeConstraint", {"user": old_name, "date": c.date, "slot": c.slot}))
                mutations.append(Mutation("addConstraint", {"user": new_name, "date": c.date, "slot": c.slot}))
            if has_entries:
                mutations.append(self._save_schedule())
        return self._commit(mutations)

    def delete_user(self, name: str) -> List[Mutation]:
        person = self.state.person_by_name(name)
        if person is None:
            return []
        self.state.roster = [p for p in self.state.roster if p.id != person.id]
        removed = self.state.constraints_for(person.id)
        self.state.constraints = [c for c in self.state.constraints if c.person_id != person.id]
        # 스케줄 항목은 그대로 둔다(표시 이름은 names에 남음)
        mutations = [Mutation("deleteUser", {"name": name})]
        mutations += [
            Mutation("removeConstraint", {"user": name, "date": c.date, "slot": c.slot}) for c in removed
        ]
        return self._commit(mutations)

    # ---------- 근무 불가 ----------
    def add_constraint(self, user: str, date, slots: Union[str, Iterable[str]]) -> List[Mutation]:
        if not user or not str(user).strip():
            raise ValidationError("직원을 선택해주세요.")
        person = self.state.person_by_name(str(user).strip())
        if person is None:
            raise ValidationError(f"없는 직원입니다: {user}")
        date_key = _require_date(date)
        wanted = [slots] if isinstance(slots, str) else list(slots or [])
        if not wanted:
            raise ValidationError("AM/PM 중 하나 이상 선택해주세요.")
        bad = [s for s in wanted if s not in SLOTS]
        if bad:
            raise ValidationError(f"알 수 없는 시간대: {', '.join(map(str, bad))}")

        mutations = []
        for slot in (s for s in SLOTS if s in wanted):
            self.state.constraints.append(Constraint(person.id, date_key, slot))
            mutations.append(Mutation("addConstraint", {"user": person.name, "date": date_key, "slot": slot}))
        return self._commit(mutations)

    def remove_constraint(self, user: str, date, slot: str) -> List[Mutation]:
        person_id = self.state.id_of(user)
        date_key = format_date(date)
        target = Constraint(person_id, date_key, slot)
        # 같은 제약이 여러 건이면 첫 번째 하나만
        idx = next((i for i, c in enumerate(self.state.constraints) if c == target), None)
        if person_id is None or idx is None:
            return []
        del self.state.constraints[idx]
        return self._commit([Mutation("removeConstraint", {"user": user, "date": date_key, "slot": slot})])

    # ---------- 휴일 ----------
    def add_holiday(self, date) -> List[Mutation]:
        date_key = _require_date(date)
        if self.state.is_holiday(date_key):
            return []
        if any(slot_key(date_key, s) in self.state.schedule for s in SLOTS):
            self._require_loaded()
        self.state.holidays.append(date_key)
        cleared = [self.state.schedule.pop(slot_key(date_key, s), None) for s in SLOTS]
        mutations = [Mutation("addHoliday", {"date": date_key})]
        if any(v is not None for v in cleared):
            mutations.append(self._save_schedule())
        return self._commit(mutations)

    def remove_holiday(self, date) -> List[Mutation]:
        date_key = format_date(date)
        if not self.state.is_holiday(date_key):
            return []
        self.state.holidays.remove(date_key)
        return self._commit([Mutation("removeHoliday", {"date": date_key})])

    def toggle_holiday(self, date) -> List[Mutation]:
        date_key = _require_date(date)
        if self.state.is_holiday(date_key):
            return self.remove_holiday(date_key)
        return self.add_holiday(date_key)

    # ---------- 배정 ----------
    def generate(self, year: int, month: int, policy: Optional[str] = None) -> List[Mutation]:
        if not 1 <= int(month) <= 12:
            raise ValidationError(f"월은 1~12 이어야 합니다: {month}")
        policy = policy or self.settings.fairness
        if policy not in FAIRNESS_POLICIES:
            raise ValidationError(f"지원하지 않는 공정성 정책: {policy}")
        self._require_loaded()
        self.last_report = generate_month(self.state, int(year), int(month), policy, self.settings.duty_weekday)
        return self._commit([self._save_schedule()])

    def _save_schedule(self) -> Mutation:
        # 전체 맵(모든 달)을 한 번에 교체
        return Mutation("saveSchedule", {"schedule": self.state.wire_schedule()})

    # ---------- 표시용 ----------
    def count_table(self, year: int, month: int) -> List[CountRow]:
        return count_table(self.state, year, month)

    def schedule_names(self) -> dict:
        return self.state.wire_schedule()

    def constraint_rows(self) -> List[tuple]:
        """(이름, 날짜, 시간대) 날짜순"""
        rows = [(self.state.display_name(c.person_id), c.date, c.slot) for c in self.state.constraints]
        return sorted(rows, key=lambda r: (r[1], SLOTS.index(r[2]), r[0]))


def _require_name(name) -> str:
    name = str(name or "").strip()
    if not name:
        raise ValidationError("이름을 입력해주세요.")
    if name == UNASSIGNED:
        # 저장소에서는 미배정 표시와 구분할 수 없다
        raise ValidationError(f"'{UNASSIGNED}'은(는) 이름으로 쓸 수 없습니다.")
    return name


def _require_limit(limit) -> int:
    if isinstance(limit, bool):
        raise ValidationError("한도는 1 이상의 정수여야 합니다.")
    try:
        value = int(str(limit).strip())
    except (TypeError, ValueError):
        raise ValidationError("한도는 1 이상의 정수여야 합니다.")
    if value < 1:
        raise ValidationError("한도는 1 이상의 정수여야 합니다.")
    return value


def _require_date(date) -> str:
    if date is None or str(date).strip() == "":
        raise ValidationError("날짜를 입력해주세요.")
    date_key = format_date(date)
    try:
        parse_date_key(date_key)
    except ValueError:
        raise ValidationError(f"날짜 형식이 올바르지 않습니다(YYYY-MM-DD): {date}")
    return date_key
