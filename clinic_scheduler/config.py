# config.py
from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Literal, Optional

from clinic_scheduler.exceptions import ValidationError

# 프로젝트 루트 = .../clinic_scheduler
BASE_DIR = Path(__file__).resolve().parent
DATA_DIR = BASE_DIR / "data"
DB_FILE = DATA_DIR / "clinic.sqlite3"

WEDNESDAY = 2                  # datetime.weekday(): 0=월 ... 6=일
DEFAULT_LIMIT = 4              # 저장소에 한도가 비어 있으면 적용
LOCK_TIMEOUT = 10.0            # 저장소 쓰기 잠금 대기(초)
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

StoreKind = Literal["local", "remote"]
FairnessPolicy = Literal["run", "yearly"]

STORE_KINDS = ("local", "remote")
FAIRNESS_POLICIES = ("run", "yearly")


@dataclass
class Settings:
    store: StoreKind = "local"
    api_url: str = ""
    db_path: Path = field(default_factory=lambda: DB_FILE)
    lock_timeout: float = LOCK_TIMEOUT
    request_timeout: Optional[float] = None     # None = requests 기본값(무제한)
    duty_weekday: int = WEDNESDAY
    fairness: FairnessPolicy = "yearly"
    log_level: str = "INFO"

    def __post_init__(self):
        if self.store not in STORE_KINDS:
            raise ValidationError(f"지원하지 않는 저장소 종류: {self.store!r}")
        if self.fairness not in FAIRNESS_POLICIES:
            raise ValidationError(f"지원하지 않는 공정성 정책: {self.fairness!r}")
        if not 0 <= self.duty_weekday <= 6:
            raise ValidationError(f"요일 값은 0~6 이어야 합니다: {self.duty_weekday}")
        if self.store == "remote" and not self.api_url:
            raise ValidationError("원격 저장소를 쓰려면 API URL이 필요합니다.")
        self.db_path = Path(self.db_path)

    def override(self, **kwargs) -> "Settings":
        """None이 아닌 값만 덮어쓴 새 Settings"""
        changes = {k: v for k, v in kwargs.items() if v is not None}
        return replace(self, **changes)


def _env_float(name: str, default):
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValidationError(f"{name} 값이 숫자가 아닙니다: {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} 값이 정수가 아닙니다: {raw!r}")


def load_settings() -> Settings:
    """환경 변수 → Settings. 비어 있는 항목은 기본값."""
    return Settings(
        store=os.getenv("CLINIC_STORE", "").strip() or "local",
        api_url=os.getenv("CLINIC_API_URL", "").strip(),
        db_path=Path(os.getenv("CLINIC_DB_PATH", "").strip() or DB_FILE),
        lock_timeout=_env_float("CLINIC_LOCK_TIMEOUT", LOCK_TIMEOUT),
        request_timeout=_env_float("CLINIC_REQUEST_TIMEOUT", None),
        duty_weekday=_env_int("CLINIC_DUTY_WEEKDAY", WEDNESDAY),
        fairness=os.getenv("CLINIC_FAIRNESS", "").strip() or "yearly",
        log_level=os.getenv("CLINIC_LOG_LEVEL", "").strip() or "INFO",
    )


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
