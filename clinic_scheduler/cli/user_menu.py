# cli/user_menu.py
from clinic_scheduler.cli.common import run_action
from clinic_scheduler.exceptions import CancelAction, GoBackAction
from clinic_scheduler.utils.input_handler import choose, confirm, get_input


def user_menu(session):
    while True:
        print("\n[직원 관리]")
        print("1. 직원 목록 보기")
        print("2. 직원 추가")
        print("3. 직원 수정")
        print("4. 직원 삭제")
        print("0. 메인 메뉴로")

        try:
            choice = get_input("선택")
            if choice == "1":
                show_users(session)
            elif choice == "2":
                add_user(session)
            elif choice == "3":
                edit_user(session)
            elif choice == "4":
                delete_user(session)
            elif choice == "0":
                break
            else:
                print("잘못된 선택입니다.")
        except GoBackAction:
            print("이전 메뉴로 이동")


def show_users(session):
    roster = session.state.roster
    print("\n[직원 목록]")
    if not roster:
        print("(등록된 직원이 없습니다.)")
        return
    for p in roster:
        print(f"{p.name} | 월 한도 {p.limit}")


def add_user(session):
    name = get_input("이름")
    limit = get_input("월 최대 당직 수", default="4")
    run_action(session, session.add_user, name, limit, done=f"[{name}] 추가되었습니다.")


def edit_user(session):
    names = [p.name for p in session.state.roster]
    if not names:
        print("직원이 없습니다. 먼저 직원을 추가해주세요.")
        return
    old = choose("수정할 직원", names)
    person = session.state.person_by_name(old)
    new_name = get_input("이름", default=person.name)
    new_limit = get_input("월 최대 당직 수", default=str(person.limit))
    run_action(session, session.edit_user, old, new_name, new_limit, done="직원 정보가 수정되었습니다.")


def delete_user(session):
    names = [p.name for p in session.state.roster]
    if not names:
        print("직원이 없습니다.")
        return
    name = choose("삭제할 직원", names)
    if not confirm(f"[{name}]을(를) 삭제하시겠습니까? 근무 불가 일정도 함께 삭제됩니다."):
        raise CancelAction()
    run_action(session, session.delete_user, name, done=f"[{name}] 삭제되었습니다.")
