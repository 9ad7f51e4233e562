# utils/parse_utils.py
from datetime import datetime

from clinic_scheduler.models.schedule import SLOTS


def parse_slot_list(text: str) -> list[str]:
    """
    'am, PM' -> ['AM', 'PM']
    '오전' / '오후'도 허용, 빈문자열 -> []
    알 수 없는 토큰은 무시, 결과는 SLOTS 순서
    """
    aliases = {"AM": "AM", "PM": "PM", "오전": "AM", "오후": "PM"}
    seen = set()
    for tok in text.replace("/", ",").split(","):
        slot = aliases.get(tok.strip().upper()) or aliases.get(tok.strip())
        if slot:
            seen.add(slot)
    return [s for s in SLOTS if s in seen]


def parse_year_month(text: str) -> tuple[int, int]:
    """'2024-01' -> (2024, 1). 형식 오류면 ValueError"""
    dt = datetime.strptime(text.strip(), "%Y-%m")
    return dt.year, dt.month
