# cli/menu.py
from datetime import date

from clinic_scheduler.cli.constraint_menu import constraint_menu
from clinic_scheduler.cli.schedule_menu import print_month, schedule_menu
from clinic_scheduler.cli.user_menu import user_menu
from clinic_scheduler.exceptions import CancelAction, GoBackAction, StoreError
from clinic_scheduler.utils.input_handler import get_input


def main_menu(session):
    while True:
        state = "  ※ 저장소와 불일치" if session.diverged else ""
        print(f"\n[수요일 당직 스케줄러]{state}")
        print("1. 직원 관리")
        print("2. 근무 불가 관리")
        print("3. 당직 일정")
        print("4. 이번 달 보기")
        print("5. 다시 불러오기")
        print("0. 종료")

        try:
            choice = get_input("선택")
            if choice == "1":
                user_menu(session)
            elif choice == "2":
                constraint_menu(session)
            elif choice == "3":
                schedule_menu(session)
            elif choice == "4":
                today = date.today()
                print_month(session, today.year, today.month)
            elif choice == "5":
                reload(session)
            elif choice == "0":
                print("프로그램을 종료합니다.")
                break
            else:
                print("잘못된 선택.")
        except GoBackAction:
            print("이전 메뉴로 이동")
        except CancelAction:
            print("메인 메뉴로 이동")


def reload(session):
    try:
        session.reload()
    except StoreError as e:
        print(f"[불러오기 실패] {e}")
        return
    print(f"불러오기 완료: 직원 {len(session.state.roster)}명, 일정 {len(session.state.schedule)}건")
