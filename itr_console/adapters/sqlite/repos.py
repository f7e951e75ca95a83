import json
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

from itr_console.adapters.rows import (
    certification_from_row,
    company_from_row,
    company_to_row,
    event_from_row,
    onboarding_from_row,
    onboarding_to_row,
    profile_from_row,
    profile_to_row,
    sso_log_from_row,
    sso_log_to_row,
)
from itr_console.domain.entities import (
    Certification,
    Company,
    Onboarding,
    Profile,
    ScheduledEvent,
    SsoLog,
)
from itr_console.domain.errors import BackendError


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _ts(value: datetime) -> str:
    return value.astimezone(UTC).isoformat()


class _SQLiteRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    @contextmanager
    def _conn(self) -> Iterator[sqlite3.Connection]:
        """Connection scope; sqlite errors surface as BackendError."""
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise BackendError(f"Database unavailable: {e}") from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise BackendError(str(e)) from e
        finally:
            conn.close()


class SQLiteCompanyRepo(_SQLiteRepo):
    def find_by_invitation_code(self, code: str) -> list[Company]:
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT * FROM itr_companies WHERE invitation_code = ?", (code,)
            ).fetchall()
        return [company_from_row(r) for r in rows]

    def get_by_id(self, company_id: str) -> Company | None:
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM itr_companies WHERE id = ?", (company_id,)).fetchone()
        return company_from_row(row) if row else None

    def list_all(self) -> list[Company]:
        with self._conn() as conn:
            rows = conn.execute("SELECT * FROM itr_companies ORDER BY name").fetchall()
        return [company_from_row(r) for r in rows]

    def save(self, company: Company) -> Company:
        row = company_to_row(company)
        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO itr_companies (id, name, invitation_code, created_at)
                VALUES (:id, :name, :invitation_code, :created_at)
                ON CONFLICT(id) DO UPDATE SET
                    name=excluded.name,
                    invitation_code=excluded.invitation_code
            """,
                row,
            )
        return company


class SQLiteProfileRepo(_SQLiteRepo):
    def get_by_id(self, profile_id: str) -> Profile | None:
        with self._conn() as conn:
            row = conn.execute("SELECT * FROM profiles WHERE id = ?", (profile_id,)).fetchone()
        return profile_from_row(row) if row else None

    def save(self, profile: Profile) -> None:
        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO profiles (
                    id, email, first_name, last_name, itr_company_id, company,
                    role, avatar_url, created_at, updated_at
                ) VALUES (
                    :id, :email, :first_name, :last_name, :itr_company_id, :company,
                    :role, :avatar_url, :created_at, :updated_at
                )
                ON CONFLICT(id) DO UPDATE SET
                    email=excluded.email,
                    first_name=excluded.first_name,
                    last_name=excluded.last_name,
                    itr_company_id=excluded.itr_company_id,
                    company=excluded.company,
                    role=excluded.role,
                    avatar_url=excluded.avatar_url,
                    updated_at=excluded.updated_at
            """,
                profile_to_row(profile),
            )


_ONBOARDING_SELECT = """
    SELECT o.*, c.name AS company_name
    FROM onboardings o
    LEFT JOIN itr_companies c ON c.id = o.itr_company_id
    ORDER BY o.created_at DESC
"""


class SQLiteOnboardingRepo(_SQLiteRepo):
    def save(self, onboarding: Onboarding) -> None:
        row = onboarding_to_row(onboarding)
        row["products"] = json.dumps(row["products"])
        row["is_msp"] = int(row["is_msp"])
        row["ob_fees_activated"] = int(row["ob_fees_activated"])
        cols = list(row)
        updates = ", ".join(f"{c}=excluded.{c}" for c in cols if c not in ("id", "created_at"))
        with self._conn() as conn:
            conn.execute(
                f"INSERT INTO onboardings ({', '.join(cols)}) "
                f"VALUES ({', '.join(':' + c for c in cols)}) "
                f"ON CONFLICT(id) DO UPDATE SET {updates}",
                row,
            )

    def list_recent(self, limit: int | None = None) -> list[Onboarding]:
        sql = _ONBOARDING_SELECT
        params: tuple[Any, ...] = ()
        if limit is not None:
            sql += " LIMIT ?"
            params = (limit,)
        with self._conn() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [onboarding_from_row(r) for r in rows]


class SQLiteSsoLogRepo(_SQLiteRepo):
    def save(self, log: SsoLog) -> None:
        row = sso_log_to_row(log)
        row["metadata"] = json.dumps(row["metadata"])
        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO sso_logs (
                    id, event_type, ip_address, user_agent, itr_company_id,
                    user_id, metadata, created_at
                ) VALUES (
                    :id, :event_type, :ip_address, :user_agent, :itr_company_id,
                    :user_id, :metadata, :created_at
                )
            """,
                row,
            )

    def list_recent(self, limit: int = 200) -> list[SsoLog]:
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT l.*, c.name AS company_name
                FROM sso_logs l
                LEFT JOIN itr_companies c ON c.id = l.itr_company_id
                ORDER BY l.created_at DESC
                LIMIT ?
            """,
                (limit,),
            ).fetchall()
        return [sso_log_from_row(r) for r in rows]


class SQLiteEventRepo(_SQLiteRepo):
    def save(self, event: ScheduledEvent) -> None:
        with self._conn() as conn:
            conn.execute(
                """
                INSERT INTO events (
                    id, title, description, start_time, end_time, onboarding_id, created_by
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    description=excluded.description,
                    start_time=excluded.start_time,
                    end_time=excluded.end_time,
                    onboarding_id=excluded.onboarding_id
            """,
                (
                    event.id,
                    event.title,
                    event.description,
                    _ts(event.start_time),
                    _ts(event.end_time),
                    event.onboarding_id,
                    event.created_by,
                ),
            )

    def list_between(self, start: datetime, end: datetime) -> list[ScheduledEvent]:
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT * FROM events
                WHERE start_time >= ? AND start_time < ?
                ORDER BY start_time ASC
            """,
                (_ts(start), _ts(end)),
            ).fetchall()
        return [event_from_row(r) for r in rows]


class SQLiteCertificationRepo(_SQLiteRepo):
    def list_all(self) -> list[Certification]:
        with self._conn() as conn:
            rows = conn.execute(
                """
                SELECT c.*, p.name AS product_name
                FROM certifications c
                LEFT JOIN products p ON p.id = c.product_id
                ORDER BY c.level, c.name
            """
            ).fetchall()
        return [certification_from_row(r) for r in rows]
