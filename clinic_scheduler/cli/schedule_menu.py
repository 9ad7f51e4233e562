# cli/schedule_menu.py
from datetime import date

from clinic_scheduler.cli.common import flush_and_report, run_action
from clinic_scheduler.exceptions import CancelAction, GoBackAction, StoreError, ValidationError
from clinic_scheduler.logic.counters import yearly_counts
from clinic_scheduler.models.schedule import SLOTS, slot_key
from clinic_scheduler.utils.date_helper import duty_dates, format_date
from clinic_scheduler.utils.input_handler import confirm, get_input
from clinic_scheduler.utils.parse_utils import parse_year_month


def schedule_menu(session):
    while True:
        print("\n[당직 일정]")
        print("1. 월별 일정 보기")
        print("2. 월 배정 생성")
        print("3. 휴일 지정/해제")
        print("4. 휴일 목록")
        print("5. 당직 횟수 보기")
        print("0. 메인 메뉴로")

        try:
            choice = get_input("선택")
            if choice == "1":
                year, month = _ask_month()
                print_month(session, year, month)
            elif choice == "2":
                generate_menu(session)
            elif choice == "3":
                toggle_holiday(session)
            elif choice == "4":
                show_holidays(session)
            elif choice == "5":
                year, month = _ask_month()
                print_counts(session, year, month)
            elif choice == "0":
                break
            else:
                print("잘못된 선택.")
        except GoBackAction:
            print("이전 메뉴로 이동")


def _ask_month() -> tuple[int, int]:
    today = date.today()
    while True:
        ym = get_input("월(YYYY-MM)", default=f"{today.year:04d}-{today.month:02d}")
        try:
            return parse_year_month(ym)
        except ValueError:
            print("형식이 올바르지 않습니다. 예) 2024-01")


def print_month(session, year: int, month: int):
    state = session.state
    weekday = session.settings.duty_weekday
    print(f"\n[{year:04d}-{month:02d} 당직표]")
    print("날짜         AM            PM")
    print("-" * 40)
    for d in duty_dates(year, month, weekday):
        if state.is_holiday(d):
            print(f"{d}  [휴일]")
            continue
        cells = []
        for slot in SLOTS:
            value = state.schedule.get(slot_key(d, slot))
            cells.append(state.display_name(value) if value is not None else "-")
        print(f"{d}  {cells[0]:<12}  {cells[1]}")


def print_counts(session, year: int, month: int | None = None):
    if month is None:
        counts = yearly_counts(session.state.roster, session.state.schedule, year)
        print(f"\n[{year} 연간 당직 횟수]")
        for p in sorted(session.state.roster, key=lambda p: p.name):
            print(f"{p.name:<12} {counts[p.id]:>3}")
        return
    print(f"\n[{year:04d}-{month:02d} 당직 횟수]")
    print("이름          한도  월간  연간")
    print("-" * 32)
    for row in session.count_table(year, month):
        print(f"{row.name:<12} {row.limit:>4} {row.month:>5} {row.year:>5}")


def generate_menu(session):
    year, month = _ask_month()
    policy = session.settings.fairness
    print(f"{year:04d}-{month:02d} 배정을 새로 계산합니다. (공정성: {policy})")
    print("※ 이 달의 기존 배정은 모두 다시 계산됩니다.")
    if not confirm("진행할까요?"):
        raise CancelAction()
    try:
        session.generate(year, month)
    except (ValidationError, StoreError) as e:
        print(f"확인: {e}")
        return
    report = session.last_report
    print(f"배정 완료: 당직일 {len(report.dates)}일, 배정 {report.assigned_count}칸, "
          f"미배정 {len(report.unassigned)}칸, 휴일 {len(report.holidays)}일")
    flush_and_report(session)
    print_month(session, year, month)


def toggle_holiday(session):
    d = format_date(get_input("날짜(YYYY-MM-DD)"))
    was = session.state.is_holiday(d)
    done = f"{d} 휴일 해제" if was else f"{d} 휴일 지정(해당 날짜 배정 삭제)"
    run_action(session, session.toggle_holiday, d, done=done)


def show_holidays(session):
    print("\n[휴일 목록]")
    if not session.state.holidays:
        print("(없음)")
        return
    for d in sorted(session.state.holidays):
        print(d)
