# models/schedule.py
from typing import Dict, Literal, Tuple, Union

Slot = Literal["AM", "PM"]
SLOTS: Tuple[str, str] = ("AM", "PM")     # 배정 순서도 이 순서
UNASSIGNED = "Unassigned"

# 값: 담당자 id 또는 UNASSIGNED
Assignment = Union[int, str]
ScheduleMap = Dict[str, Assignment]


def slot_key(date_key: str, slot: str) -> str:
    """'2024-01-03', 'AM' -> '2024-01-03_AM'"""
    return f"{date_key}_{slot}"


def split_key(key: str) -> Tuple[str, str]:
    """'2024-01-03_AM' -> ('2024-01-03', 'AM'). 형식이 아니면 ValueError"""
    date_key, sep, slot = key.rpartition("_")
    if not sep or slot not in SLOTS:
        raise ValueError(f"schedule key 형식 오류: {key!r}")
    return date_key, slot


def is_valid_slot(slot) -> bool:
    return slot in SLOTS
