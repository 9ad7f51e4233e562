# models/person.py
from dataclasses import dataclass


@dataclass
class Person:
    id: int          # 세션 내부 식별자(저장소에는 이름만 저장됨)
    name: str
    limit: int       # 한 번의 배정 실행(한 달)에서 맡을 수 있는 최대 당직 수

    def to_dict(self):
        return {"name": self.name, "limit": self.limit}


@dataclass(frozen=True)
class Constraint:
    """person_id가 date의 slot에 근무 불가"""
    person_id: int
    date: str        # YYYY-MM-DD
    slot: str        # AM / PM
