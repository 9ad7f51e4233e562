# main.py
import argparse
import logging
import sys

from clinic_scheduler.config import FAIRNESS_POLICIES, STORE_KINDS, load_settings, setup_logging
from clinic_scheduler.exceptions import SchedulerError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="clinic-scheduler", description="수요일 AM/PM 당직 스케줄러")
    parser.add_argument("--store", choices=STORE_KINDS, help="local(SQLite) 또는 remote(웹 앱)")
    parser.add_argument("--api-url", help="원격 저장소 URL")
    parser.add_argument("--db", dest="db_path", help="로컬 SQLite 파일 경로")
    parser.add_argument("--log-level", help="DEBUG/INFO/WARNING/ERROR")

    sub = parser.add_subparsers(dest="command")
    sub.add_parser("gui", help="데스크톱 화면(기본)")
    sub.add_parser("cli", help="텍스트 메뉴")

    gen = sub.add_parser("generate", help="한 달 배정 생성 후 저장")
    gen.add_argument("year", type=int)
    gen.add_argument("month", type=int)
    gen.add_argument("--fairness", choices=FAIRNESS_POLICIES)

    cnt = sub.add_parser("counts", help="당직 횟수 출력")
    cnt.add_argument("year", type=int)
    cnt.add_argument("month", type=int, nargs="?")
    return parser


def run_gui(session) -> int:
    from PySide6.QtWidgets import QApplication
    from clinic_scheduler.gui.main_window import MainWindow

    app = QApplication(sys.argv)
    win = MainWindow(session)
    win.show()
    return app.exec()


def run_generate(session, year: int, month: int, fairness=None) -> int:
    from clinic_scheduler.cli.schedule_menu import print_month

    # 불러오기 실패 상태면 generate가 StoreError → main에서 종료 코드 1
    session.generate(year, month, fairness)
    failures = session.flush()
    print_month(session, year, month)
    for f in failures:
        print(f"[저장 실패] {f}", file=sys.stderr)
    return 1 if failures else 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_settings().override(
            store=args.store, api_url=args.api_url, db_path=args.db_path, log_level=args.log_level,
        )
    except SchedulerError as e:
        print(f"설정 오류: {e}", file=sys.stderr)
        return 2
    setup_logging(settings.log_level)

    from clinic_scheduler.logic.session import Session
    session = Session.open(settings)

    command = args.command or "gui"
    try:
        if command == "gui":
            return run_gui(session)
        if command == "cli":
            from clinic_scheduler.cli.menu import main_menu
            main_menu(session)
            return 0
        if command == "generate":
            return run_generate(session, args.year, args.month, args.fairness)
        if command == "counts":
            from clinic_scheduler.cli.schedule_menu import print_counts
            print_counts(session, args.year, args.month)
            return 0
    except SchedulerError as e:
        logger.error("%s failed: %s", command, e)
        print(f"오류: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
