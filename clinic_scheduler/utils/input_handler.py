# utils/input_handler.py
from clinic_scheduler.exceptions import CancelAction, GoBackAction


def get_input(prompt: str, allow_empty: bool = False, default: str | None = None) -> str:
    label = prompt
    if default is not None:
        label += f" [{default}]"
    label += ": "

    while True:
        v = input(label).strip()

        low = v.lower()
        if low in ("취소", "cancel"):
            raise CancelAction()
        if low in ("뒤로", "back"):
            raise GoBackAction()

        if not v and default is not None:
            return default
        if not v and allow_empty:
            return ""
        if not v:
            print("값을 입력하거나 '취소/뒤로'를 입력하세요.")
            continue
        return v


def confirm(prompt: str) -> bool:
    """Y로 시작하면 True"""
    return get_input(f"{prompt} (Y/N)").upper().startswith("Y")


def choose(prompt: str, options: list[str]) -> str:
    """번호 목록에서 하나 선택. 번호 대신 값을 그대로 입력해도 된다."""
    for i, opt in enumerate(options, 1):
        print(f"  {i}. {opt}")
    while True:
        v = get_input(prompt)
        if v.isdigit() and 1 <= int(v) <= len(options):
            return options[int(v) - 1]
        if v in options:
            return v
        print("목록에 없는 값입니다.")
