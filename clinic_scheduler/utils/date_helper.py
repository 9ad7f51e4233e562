# utils/date_helper.py
import calendar
from datetime import date, datetime

from clinic_scheduler.config import WEDNESDAY

DATE_FMT = "%Y-%m-%d"


def duty_dates(year: int, month: int, weekday: int = WEDNESDAY) -> list[str]:
    """
    해당 월에서 weekday(0=월..6=일)에 해당하는 날짜(YYYY-MM-DD)를 오름차순으로 반환.
    - month는 1~12
    - 일수는 calendar로 계산(윤년 포함)
    - 예: 2024-01, 수요일 → 03, 10, 17, 24, 31
    """
    cal = calendar.Calendar(firstweekday=weekday)
    return [
        d.strftime(DATE_FMT)
        for d in cal.itermonthdates(year, month)
        if d.month == month and d.weekday() == weekday
    ]


def month_range(year: int, month: int) -> tuple[str, str]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1).strftime(DATE_FMT), date(year, month, last).strftime(DATE_FMT)


def parse_date_key(text: str) -> date:
    """'2024-1-3' 같은 입력도 허용. 잘못된 날짜면 ValueError"""
    return datetime.strptime(str(text).strip(), DATE_FMT).date()


def format_date(value) -> str:
    """
    date/datetime/문자열 → 'YYYY-MM-DD'.
    빈 값은 '', 해석할 수 없는 문자열은 그대로 둔다.
    """
    if value is None or value == "":
        return ""
    if isinstance(value, (date, datetime)):
        return value.strftime(DATE_FMT)
    text = str(value).strip()
    # '2024-01-03T00:00:00.000Z' 처럼 시간이 붙어 오는 경우
    head = text[:10] if len(text) > 10 and text[10] in "T " else text
    try:
        return parse_date_key(head).strftime(DATE_FMT)
    except ValueError:
        return text


def in_month(date_key: str, year: int, month: int) -> bool:
    """'2024-01-03' 또는 '2024-01-03_AM' 같은 키가 해당 월이면 True"""
    first, last = month_range(year, month)
    return first <= date_key[:10] <= last


def in_year(date_key: str, year: int) -> bool:
    return date_key.startswith(f"{year:04d}-")


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """(2024, 12) + 1 → (2025, 1)"""
    idx = year * 12 + (month - 1) + delta
    return idx // 12, idx % 12 + 1
