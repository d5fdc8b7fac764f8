"""
SQLite state for organization processing.

Tables:
- organizations: one row per organization name, current status and channel
- attempts: append-only log of every stage outcome and email send

The organizations row is what the pipeline reads on the next run; attempts
are never updated or deleted.
"""

import json
import logging
import os
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from donotcontact import config
from donotcontact.selector import CONTACT_TYPES, NONE

logger = logging.getLogger(__name__)

PENDING = "pending"
SUCCESS = "success"
FAILED = "failed"
MANUAL = "manual"

STATUSES = (PENDING, SUCCESS, FAILED, MANUAL)

ATTEMPT_TYPES = ("search", "contact_find", "email", "form")


@dataclass
class Organization:
    """A row of the organizations table."""
    id: Optional[int] = None
    name: str = ""
    website: Optional[str] = None
    contact_type: str = NONE
    contact_value: Optional[str] = None
    status: str = PENDING
    error_message: Optional[str] = None
    attempts: int = 0
    last_attempt_at: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def has_email(self) -> bool:
        return self.contact_type in ("email", "both")


@dataclass
class Attempt:
    """A row of the attempts table."""
    id: Optional[int] = None
    org_id: Optional[int] = None
    attempt_type: str = ""
    success: bool = False
    details_json: Optional[str] = None
    created_at: Optional[str] = None

    @property
    def details(self) -> dict:
        return json.loads(self.details_json) if self.details_json else {}


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _check_outcome(status: str, contact_type: str, contact_value: Optional[str]) -> None:
    if status not in STATUSES:
        raise ValueError(f"Unknown status: {status}")
    if contact_type not in CONTACT_TYPES:
        raise ValueError(f"Unknown contact type: {contact_type}")
    if (contact_value is None) != (contact_type == NONE):
        raise ValueError(
            f"contact_value must be set exactly when contact_type is not 'none' "
            f"(got {contact_type!r}, {contact_value!r})"
        )
    if status == SUCCESS and contact_type == NONE:
        raise ValueError("A successful outcome needs a contact channel")


class OrganizationStore:
    """
    Durable per-organization state plus the attempt log.

    Each method opens its own connection, so a store can be shared freely
    within one process. Only one pipeline should write at a time.

    Usage:
        store = OrganizationStore("data/state.db")
        store.init_db()
        store.import_organizations(["Acme Org", "Beta Fund"])
        for org in store.list_by_status("pending"):
            ...
    """

    def __init__(self, db_path: Optional[str] = None):
        self.db_path = db_path or config.DB_PATH

    def _connect(self) -> sqlite3.Connection:
        """Connect to the database, creating the parent directory if needed."""
        directory = os.path.dirname(self.db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def init_db(self) -> None:
        """Create tables and indexes if they don't exist."""
        conn = self._connect()
        try:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS organizations (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL UNIQUE,
                    website TEXT,
                    contact_type TEXT NOT NULL DEFAULT 'none',
                    contact_value TEXT,
                    status TEXT NOT NULL DEFAULT 'pending',
                    error_message TEXT,
                    attempts INTEGER NOT NULL DEFAULT 0,
                    last_attempt_at TIMESTAMP,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS attempts (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    org_id INTEGER NOT NULL REFERENCES organizations(id),
                    attempt_type TEXT NOT NULL,
                    success BOOLEAN NOT NULL,
                    details_json TEXT,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            conn.execute("CREATE INDEX IF NOT EXISTS idx_org_status ON organizations(status)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_attempts_org ON attempts(org_id)")
            conn.commit()
        finally:
            conn.close()

    # -----------------------------------------------------------------------
    # Organizations
    # -----------------------------------------------------------------------

    def import_organizations(self, names: list[str]) -> int:
        """Insert new organization names. Returns how many rows were created."""
        conn = self._connect()
        try:
            created = 0
            with conn:
                for name in names:
                    if not name or not name.strip():
                        continue
                    cursor = conn.execute(
                        "INSERT OR IGNORE INTO organizations (name) VALUES (?)",
                        (name.strip(),)
                    )
                    created += cursor.rowcount
            logger.info("Imported %d new organizations (%d names given)", created, len(names))
            return created
        finally:
            conn.close()

    def get_organization(self, name: str) -> Optional[Organization]:
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT * FROM organizations WHERE name = ?", (name,)
            ).fetchone()
            if row:
                return Organization(**dict(row))
            return None
        finally:
            conn.close()

    def get_all_organizations(self) -> list[Organization]:
        conn = self._connect()
        try:
            rows = conn.execute("SELECT * FROM organizations ORDER BY name").fetchall()
            return [Organization(**dict(row)) for row in rows]
        finally:
            conn.close()

    def list_by_status(self, status: str) -> list[Organization]:
        """All organizations in the given status, ordered by name."""
        if status not in STATUSES:
            raise ValueError(f"Unknown status: {status}")
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT * FROM organizations WHERE status = ? ORDER BY name",
                (status,)
            ).fetchall()
            return [Organization(**dict(row)) for row in rows]
        finally:
            conn.close()

    def record_outcome(
        self,
        name: str,
        status: str,
        contact_type: str = NONE,
        contact_value: Optional[str] = None,
        website: Optional[str] = None,
        error_message: Optional[str] = None,
        attempt: Optional[tuple] = None,
    ) -> None:
        """
        Write the terminal outcome of one pipeline pass for an organization.

        Increments `attempts` and stamps `last_attempt_at`. A None website
        keeps whatever is already stored. `attempt` is an optional
        (attempt_type, success, details) tuple appended in the same
        transaction.
        """
        _check_outcome(status, contact_type, contact_value)

        conn = self._connect()
        try:
            with conn:
                cursor = conn.execute(
                    """
                    UPDATE organizations
                    SET website = COALESCE(?, website),
                        contact_type = ?,
                        contact_value = ?,
                        status = ?,
                        error_message = ?,
                        attempts = attempts + 1,
                        last_attempt_at = ?
                    WHERE name = ?
                    """,
                    (website, contact_type, contact_value, status, error_message, _now(), name)
                )
                if cursor.rowcount == 0:
                    logger.warning("record_outcome: unknown organization '%s'", name)
                    return
                if attempt is not None:
                    attempt_type, success, details = attempt
                    self._insert_attempt(conn, name, attempt_type, success, details)
        finally:
            conn.close()

    def cache_website(self, name: str, website: str) -> bool:
        """Store the website if none is recorded yet. Returns True if written."""
        if not website:
            return False
        conn = self._connect()
        try:
            with conn:
                cursor = conn.execute(
                    "UPDATE organizations SET website = ? WHERE name = ? AND website IS NULL",
                    (website, name)
                )
            return cursor.rowcount > 0
        finally:
            conn.close()

    def reset(self, name: str) -> int:
        """Put one organization back to pending. Returns rows touched."""
        conn = self._connect()
        try:
            with conn:
                cursor = conn.execute(
                    "UPDATE organizations SET status = 'pending', error_message = NULL WHERE name = ?",
                    (name,)
                )
            return cursor.rowcount
        finally:
            conn.close()

    def reset_all(self) -> int:
        """Put every organization back to pending. Returns rows touched."""
        conn = self._connect()
        try:
            with conn:
                cursor = conn.execute(
                    "UPDATE organizations SET status = 'pending', error_message = NULL"
                )
            return cursor.rowcount
        finally:
            conn.close()

    # -----------------------------------------------------------------------
    # Attempts
    # -----------------------------------------------------------------------

    def _insert_attempt(
        self,
        conn: sqlite3.Connection,
        org_name: str,
        attempt_type: str,
        success: bool,
        details: Optional[dict],
    ) -> bool:
        if attempt_type not in ATTEMPT_TYPES:
            raise ValueError(f"Unknown attempt type: {attempt_type}")

        row = conn.execute(
            "SELECT id FROM organizations WHERE name = ?", (org_name,)
        ).fetchone()
        if row is None:
            return False

        conn.execute(
            """
            INSERT INTO attempts (org_id, attempt_type, success, details_json, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                row["id"],
                attempt_type,
                1 if success else 0,
                json.dumps(details) if details else None,
                _now(),
            )
        )
        return True

    def append_attempt(
        self,
        org_name: str,
        attempt_type: str,
        success: bool,
        details: Optional[dict] = None,
    ) -> bool:
        """
        Append an attempt record. Unknown organizations are ignored.

        Returns True if a row was written.
        """
        conn = self._connect()
        try:
            with conn:
                written = self._insert_attempt(conn, org_name, attempt_type, success, details)
            if not written:
                logger.debug("Attempt for unknown organization '%s' ignored", org_name)
            return written
        finally:
            conn.close()

    def get_attempts(self, org_name: str) -> list[Attempt]:
        """Attempts for one organization, oldest first."""
        conn = self._connect()
        try:
            rows = conn.execute(
                """
                SELECT a.* FROM attempts a
                JOIN organizations o ON o.id = a.org_id
                WHERE o.name = ?
                ORDER BY a.id
                """,
                (org_name,)
            ).fetchall()
            attempts = []
            for row in rows:
                data = dict(row)
                data["success"] = bool(data["success"])
                attempts.append(Attempt(**data))
            return attempts
        finally:
            conn.close()

    def has_successful_attempt(self, org_name: str, attempt_type: str) -> bool:
        conn = self._connect()
        try:
            row = conn.execute(
                """
                SELECT 1 FROM attempts a
                JOIN organizations o ON o.id = a.org_id
                WHERE o.name = ? AND a.attempt_type = ? AND a.success = 1
                LIMIT 1
                """,
                (org_name, attempt_type)
            ).fetchone()
            return row is not None
        finally:
            conn.close()

    # -----------------------------------------------------------------------
    # Statistics
    # -----------------------------------------------------------------------

    def get_stats(self) -> dict:
        """Counts by status and by contact type, computed from current rows."""
        conn = self._connect()
        try:
            row = conn.execute(
                """
                SELECT
                    COUNT(*) AS total,
                    SUM(CASE WHEN status = 'pending' THEN 1 ELSE 0 END) AS pending,
                    SUM(CASE WHEN status = 'success' THEN 1 ELSE 0 END) AS success,
                    SUM(CASE WHEN status = 'failed' THEN 1 ELSE 0 END) AS failed,
                    SUM(CASE WHEN status = 'manual' THEN 1 ELSE 0 END) AS manual,
                    SUM(CASE WHEN contact_type IN ('email', 'both') THEN 1 ELSE 0 END) AS with_email,
                    SUM(CASE WHEN contact_type IN ('form', 'both') THEN 1 ELSE 0 END) AS with_form
                FROM organizations
                """
            ).fetchone()
            return {key: (row[key] or 0) for key in row.keys()}
        finally:
            conn.close()
