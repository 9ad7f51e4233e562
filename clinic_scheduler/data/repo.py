# data/repo.py
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict

from clinic_scheduler.config import DEFAULT_LIMIT, LOCK_TIMEOUT
from clinic_scheduler.exceptions import StoreError
from clinic_scheduler.models.mutation import Mutation
from clinic_scheduler.utils.date_helper import format_date

logger = logging.getLogger(__name__)


class SqliteStore:
    """
    로컬 SQLite 저장소. 원격 저장소와 같은 계약(fetch_all / apply)을 따른다.
    - 쓰기는 BEGIN IMMEDIATE로 잠금을 잡고, lock_timeout(초) 안에 못 잡으면 StoreError
    - editUser/deleteUser는 users 테이블만 바꾼다(제약/스케줄 정리는 호출 측 변경 목록으로)
    """
    def __init__(self, db_path="clinic.sqlite3", lock_timeout: float = LOCK_TIMEOUT):
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        # isolation_level=None: 트랜잭션은 직접 BEGIN/COMMIT
        self.conn = sqlite3.connect(self.db_path, timeout=lock_timeout,
                                    isolation_level=None, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._create_tables()
        self._handlers = {
            "addUser": self._add_user,
            "editUser": self._edit_user,
            "deleteUser": self._delete_user,
            "addConstraint": self._add_constraint,
            "removeConstraint": self._remove_constraint,
            "addHoliday": self._add_holiday,
            "removeHoliday": self._remove_holiday,
            "saveSchedule": self._save_schedule,
        }

    def _create_tables(self):
        cur = self.conn.cursor()
        cur.execute("""
        CREATE TABLE IF NOT EXISTS users(
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            duty_limit INTEGER
        );
        """)
        cur.execute("""
        CREATE TABLE IF NOT EXISTS constraints(
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user TEXT NOT NULL,
            date TEXT NOT NULL,          -- YYYY-MM-DD
            slot TEXT NOT NULL           -- 'AM' | 'PM'
        );
        """)
        cur.execute("""
        CREATE TABLE IF NOT EXISTS schedule(
            key TEXT PRIMARY KEY,        -- YYYY-MM-DD_AM | YYYY-MM-DD_PM
            assigned TEXT NOT NULL       -- 이름 또는 'Unassigned'
        );
        """)
        cur.execute("""
        CREATE TABLE IF NOT EXISTS holidays(
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            date TEXT NOT NULL
        );
        """)
        cur.execute("CREATE INDEX IF NOT EXISTS ix_constraints_user ON constraints(user, date, slot);")

    def close(self):
        self.conn.close()

    # --- 조회 ---
    def fetch_all(self) -> Dict[str, Any]:
        try:
            cur = self.conn.cursor()
            cur.execute("SELECT name, duty_limit FROM users ORDER BY id;")
            users = [{"name": r["name"], "limit": r["duty_limit"] or DEFAULT_LIMIT} for r in cur.fetchall()]
            cur.execute("SELECT user, date, slot FROM constraints ORDER BY id;")
            constraints = [dict(r) for r in cur.fetchall()]
            cur.execute("SELECT key, assigned FROM schedule ORDER BY key;")
            schedule = {r["key"]: r["assigned"] for r in cur.fetchall()}
            cur.execute("SELECT date FROM holidays ORDER BY id;")
            holidays = [r["date"] for r in cur.fetchall()]
        except sqlite3.Error as e:
            raise StoreError(f"저장소 읽기 실패: {e}") from e
        return {"users": users, "constraints": constraints, "schedule": schedule, "holidays": holidays}

    # --- 변경 ---
    def apply(self, mutation: Mutation) -> None:
        handler = self._handlers.get(mutation.action)
        if handler is None:
            raise StoreError(f"알 수 없는 액션: {mutation.action}")
        try:
            self.conn.execute("BEGIN IMMEDIATE;")     # 쓰기 잠금(대기 상한 = lock_timeout)
        except sqlite3.OperationalError as e:
            raise StoreError(f"저장소 잠금 획득 실패: {e}") from e
        try:
            handler(self.conn.cursor(), mutation.payload)
            self.conn.execute("COMMIT;")
        except (sqlite3.Error, KeyError, TypeError, ValueError) as e:
            self.conn.execute("ROLLBACK;")
            raise StoreError(f"{mutation.action} 실패: {e!r}") from e
        logger.debug("applied %s", mutation.describe())

    def _add_user(self, cur, data):
        cur.execute("INSERT INTO users(name, duty_limit) VALUES(?,?)", (data["name"], int(data["limit"])))

    def _edit_user(self, cur, data):
        cur.execute("UPDATE users SET name=?, duty_limit=? WHERE name=?",
                    (data["newName"], int(data["newLimit"]), data["oldName"]))

    def _delete_user(self, cur, data):
        cur.execute("DELETE FROM users WHERE name=?", (data["name"],))

    def _add_constraint(self, cur, data):
        cur.execute("INSERT INTO constraints(user, date, slot) VALUES(?,?,?)",
                    (data["user"], format_date(data["date"]), data["slot"]))

    def _remove_constraint(self, cur, data):
        # 같은 제약이 여러 건이어도 한 건만 삭제
        cur.execute("""
            DELETE FROM constraints WHERE id = (
                SELECT id FROM constraints WHERE user=? AND date=? AND slot=? ORDER BY id LIMIT 1
            )
        """, (data["user"], format_date(data["date"]), data["slot"]))

    def _add_holiday(self, cur, data):
        cur.execute("INSERT INTO holidays(date) VALUES(?)", (format_date(data["date"]),))

    def _remove_holiday(self, cur, data):
        cur.execute("""
            DELETE FROM holidays WHERE id = (
                SELECT id FROM holidays WHERE date=? ORDER BY id LIMIT 1
            )
        """, (format_date(data["date"]),))

    def _save_schedule(self, cur, data):
        # 전체 교체
        rows = [(str(k), str(v)) for k, v in data["schedule"].items()]
        cur.execute("DELETE FROM schedule;")
        cur.executemany("INSERT INTO schedule(key, assigned) VALUES(?,?)", rows)
