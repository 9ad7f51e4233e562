# exceptions.py


class SchedulerError(Exception):
    """모든 도메인 예외의 공통 부모"""


class ValidationError(SchedulerError):
    """입력값 오류(빈 이름, 0 이하 한도, 날짜/슬롯 누락 등). 상태 변경 전에 발생."""


class ConflictError(SchedulerError):
    """이름 중복(추가/이름 변경)"""


class StoreError(SchedulerError):
    """저장소/통신 오류: 잘못된 응답, 네트워크 실패, 잠금 대기 초과, 저장소 측 예외"""


# ---------- CLI 이동 ----------
class CancelAction(Exception):
    """'취소' 입력 → 메인 메뉴로"""


class GoBackAction(Exception):
    """'뒤로' 입력 → 이전 메뉴로"""
