# data/sync.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List

from clinic_scheduler.exceptions import StoreError
from clinic_scheduler.models.mutation import Mutation

logger = logging.getLogger(__name__)


@dataclass
class SyncFailure:
    mutation: Mutation
    message: str

    def __str__(self):
        return f"{self.mutation.describe()}: {self.message}"


class SyncQueue:
    """
    로컬 반영이 끝난 변경 목록을 저장소로 보낸다(낙관적 반영).
    - 실패해도 로컬 상태는 되돌리지 않고, 자동 재시도도 하지 않는다
    - 한 건이라도 실패하면 diverged=True → 다시 불러오기(reload)로만 해소
    """
    def __init__(self, store):
        self.store = store
        self.pending: List[Mutation] = []
        self.diverged = False

    def push(self, mutations: List[Mutation]) -> None:
        self.pending.extend(mutations)

    def flush(self) -> List[SyncFailure]:
        failures = []
        batch, self.pending = self.pending, []
        for m in batch:
            try:
                self.store.apply(m)
            except StoreError as e:
                failures.append(SyncFailure(m, str(e)))
                logger.error("sync failed for %s: %s", m.describe(), e)
                if not m.retry_safe:
                    logger.warning("%s is not retry-safe; reload before re-sending", m.action)
        if failures:
            self.diverged = True
        return failures

    def reset(self) -> None:
        """reload 직후: 보내지 못한 변경은 버리고 불일치 표시 해제"""
        if self.pending:
            logger.warning("dropping %d unsent change(s) on reload", len(self.pending))
        self.pending = []
        self.diverged = False
