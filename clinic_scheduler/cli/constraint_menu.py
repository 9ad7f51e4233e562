# cli/constraint_menu.py
from clinic_scheduler.cli.common import run_action
from clinic_scheduler.exceptions import GoBackAction
from clinic_scheduler.utils.input_handler import choose, get_input
from clinic_scheduler.utils.parse_utils import parse_slot_list


def constraint_menu(session):
    while True:
        print("\n[근무 불가 관리]")
        print("1. 목록 보기")
        print("2. 추가")
        print("3. 삭제")
        print("0. 메인 메뉴로")

        try:
            choice = get_input("선택")
            if choice == "1":
                show_constraints(session)
            elif choice == "2":
                add_constraint(session)
            elif choice == "3":
                remove_constraint(session)
            elif choice == "0":
                break
            else:
                print("잘못된 선택.")
        except GoBackAction:
            print("이전 메뉴로 이동")


def show_constraints(session):
    rows = session.constraint_rows()
    print("\n[근무 불가 목록]")
    if not rows:
        print("(없음)")
        return
    for i, (name, date, slot) in enumerate(rows, 1):
        print(f"{i:>3}. {date} {slot}  {name}")


def add_constraint(session):
    names = [p.name for p in session.state.roster]
    if not names:
        print("직원이 없습니다. 먼저 직원을 추가해주세요.")
        return
    user = choose("직원", names)
    date = get_input("날짜(YYYY-MM-DD)")
    slots = parse_slot_list(get_input("시간대(AM,PM)", default="AM,PM"))
    run_action(session, session.add_constraint, user, date, slots, done="근무 불가 일정이 추가되었습니다.")


def remove_constraint(session):
    rows = session.constraint_rows()
    if not rows:
        print("삭제할 항목이 없습니다.")
        return
    show_constraints(session)
    v = get_input("삭제할 번호")
    if not v.isdigit() or not 1 <= int(v) <= len(rows):
        print("잘못된 번호입니다.")
        return
    name, date, slot = rows[int(v) - 1]
    run_action(session, session.remove_constraint, name, date, slot, done="삭제되었습니다.")
