# cli/common.py
from clinic_scheduler.exceptions import ConflictError, StoreError, ValidationError


def flush_and_report(session) -> None:
    """로컬 반영 후 저장소 전송. 실패해도 로컬 상태는 유지."""
    failures = session.flush()
    for f in failures:
        print(f"[저장 실패] {f}")
    if session.diverged:
        print("※ 저장소와 화면 내용이 다를 수 있습니다. 메인 메뉴 '다시 불러오기'로 맞춰주세요.")


def run_action(session, action, *args, done: str = "") -> bool:
    """
    session 조작 실행 → 검증/중복 오류는 메시지만 출력(상태 변화 없음).
    변경이 없으면(대상 없음) 안내만.
    """
    try:
        mutations = action(*args)
    except (ValidationError, ConflictError, StoreError) as e:
        print(f"확인: {e}")
        return False
    if not mutations:
        print("변경할 대상이 없습니다.")
        return False
    if done:
        print(done)
    flush_and_report(session)
    return True
