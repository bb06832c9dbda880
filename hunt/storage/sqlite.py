"""
SQLite-based job storage with employer lookup and description snapshots.
"""

from __future__ import annotations

import logging
import os
import sqlite3
import threading
from typing import Dict, List, Optional

import pandas as pd

from hunt.models import ExistingRecordView, JobDescription, ParsedJob, employer_key, now_utc_iso

logger = logging.getLogger(__name__)

JOB_STATUSES = ("new", "reviewing", "applied", "rejected", "closed")
EMPLOYER_STATUSES = ("ok", "yuck", "never")

_RECORD_SELECT = """
    SELECT j.id, j.title, e.name AS employer, j.url
    FROM jobs j
    LEFT JOIN employers e ON j.employer_id = e.id
"""

_JOB_SELECT = """
    SELECT j.id, j.title, e.name AS employer, e.status AS employer_status,
           j.url, j.source, j.status,
           j.location, j.pay_min, j.pay_max, j.job_code, j.no_longer_accepting,
           j.raw_text, j.described_at, j.created_at, j.updated_at
    FROM jobs j
    LEFT JOIN employers e ON j.employer_id = e.id
"""


def _to_record(row: sqlite3.Row) -> ExistingRecordView:
    return ExistingRecordView(
        id=row["id"],
        title=row["title"],
        employer=row["employer"],
        url=row["url"],
    )


class JobDatabase:
    """
    SQLite database of job postings.

    Serves as the record lookup for duplicate checks: records are handed
    out as read-only ExistingRecordView projections in insertion order.
    """

    def __init__(self, db_path: str):
        """
        Initialize the database.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path
        os.makedirs(os.path.dirname(self.db_path) or ".", exist_ok=True)
        self._lock = threading.Lock()
        self._conn: Optional[sqlite3.Connection] = None
        self._init_db()

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (creating if needed)."""
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
        return self._conn

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._lock:
            conn = self._get_conn()
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS employers (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    name_key TEXT NOT NULL UNIQUE,  -- case-folded name, the lookup key
                    status TEXT NOT NULL DEFAULT 'ok' CHECK (status IN ('ok', 'yuck', 'never')),
                    notes TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS jobs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    employer_id INTEGER REFERENCES employers(id),
                    title TEXT NOT NULL,
                    url TEXT,
                    source TEXT,
                    status TEXT NOT NULL DEFAULT 'new'
                        CHECK (status IN ('new', 'reviewing', 'applied', 'rejected', 'closed')),
                    location TEXT,
                    pay_min INTEGER,
                    pay_max INTEGER,
                    job_code TEXT,  -- secondary dedupe/reference hint
                    no_longer_accepting INTEGER NOT NULL DEFAULT 0,
                    raw_text TEXT,
                    described_at TEXT,  -- set once a full posting page was fetched
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS job_snapshots (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    job_id INTEGER NOT NULL REFERENCES jobs(id) ON DELETE CASCADE,
                    raw_text TEXT NOT NULL,
                    captured_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_jobs_employer ON jobs(employer_id);
                CREATE INDEX IF NOT EXISTS idx_jobs_status ON jobs(status);
                CREATE INDEX IF NOT EXISTS idx_jobs_url ON jobs(url);
                CREATE INDEX IF NOT EXISTS idx_snapshots_job ON job_snapshots(job_id);
            """)
            conn.commit()

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._conn:
                self._conn.close()
                self._conn = None

    # ----------------------------- Employers -----------------------------

    def _employer_id(self, conn: sqlite3.Connection, name: str) -> int:
        key = employer_key(name)
        row = conn.execute("SELECT id FROM employers WHERE name_key = ?", (key,)).fetchone()
        if row:
            return row["id"]
        now = now_utc_iso()
        cursor = conn.execute(
            "INSERT INTO employers (name, name_key, created_at, updated_at) VALUES (?, ?, ?, ?)",
            (name.strip(), key, now, now),
        )
        return cursor.lastrowid

    def get_or_create_employer(self, name: str) -> int:
        """Return the id of the employer with this name (case-insensitive), creating it if needed."""
        with self._lock:
            conn = self._get_conn()
            employer_id = self._employer_id(conn, name)
            conn.commit()
            return employer_id

    def get_employer(self, name: str) -> Optional[Dict]:
        """Employer with this name (case-insensitive) and its job count, or None."""
        with self._lock:
            conn = self._get_conn()
            row = conn.execute("""
                SELECT e.id, e.name, e.status, e.notes, e.created_at, e.updated_at,
                       COUNT(j.id) AS job_count
                FROM employers e
                LEFT JOIN jobs j ON j.employer_id = e.id
                WHERE e.name_key = ?
                GROUP BY e.id
            """, (employer_key(name),)).fetchone()
            return dict(row) if row else None

    def list_employers(self, status: Optional[str] = None) -> List[Dict]:
        """Employers ordered by name, optionally only those with a given status."""
        sql = """
            SELECT e.id, e.name, e.status, COUNT(j.id) AS job_count
            FROM employers e
            LEFT JOIN jobs j ON j.employer_id = e.id
        """
        params: List[str] = []
        if status:
            sql += " WHERE e.status = ?"
            params.append(status)
        sql += " GROUP BY e.id ORDER BY e.name_key"

        with self._lock:
            conn = self._get_conn()
            return [dict(row) for row in conn.execute(sql, params).fetchall()]

    def set_employer_status(self, name: str, status: str) -> int:
        """
        Mark an employer ok, yuck or never, creating it if needed.

        Returns the employer id.
        """
        if status not in EMPLOYER_STATUSES:
            raise ValueError(f"Unknown employer status {status!r}; expected one of {', '.join(EMPLOYER_STATUSES)}")
        if not employer_key(name):
            raise ValueError("Employer name is empty")
        with self._lock:
            conn = self._get_conn()
            employer_id = self._employer_id(conn, name)
            conn.execute(
                "UPDATE employers SET status = ?, updated_at = ? WHERE id = ?",
                (status, now_utc_iso(), employer_id),
            )
            conn.commit()
        logger.info("Employer %r marked %s", name, status)
        return employer_id

    # ----------------------------- Jobs -----------------------------

    def add_job(self, job: ParsedJob) -> int:
        """Insert a parsed job and its first snapshot. Returns the new job id."""
        now = now_utc_iso()
        status = "closed" if job.no_longer_accepting else "new"

        with self._lock:
            conn = self._get_conn()
            employer_id = self._employer_id(conn, job.employer) if job.employer else None
            cursor = conn.execute("""
                INSERT INTO jobs (
                    employer_id, title, url, source, status, location,
                    pay_min, pay_max, job_code, no_longer_accepting, raw_text,
                    created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                employer_id, job.title, job.url, job.source.value, status, job.location,
                job.pay_min, job.pay_max, job.job_code, int(job.no_longer_accepting),
                job.raw_text or None,
                now, now,
            ))
            job_id = cursor.lastrowid
            if job.raw_text:
                conn.execute(
                    "INSERT INTO job_snapshots (job_id, raw_text, captured_at) VALUES (?, ?, ?)",
                    (job_id, job.raw_text, now),
                )
            conn.commit()

        logger.debug("Added job #%s: %s", job_id, job.title)
        return job_id

    def get_job(self, job_id: int) -> Optional[Dict]:
        """Get one job as a dict, or None."""
        with self._lock:
            conn = self._get_conn()
            row = conn.execute(_JOB_SELECT + " WHERE j.id = ?", (job_id,)).fetchone()
            return dict(row) if row else None

    def list_jobs(self, status: Optional[str] = None, employer: Optional[str] = None) -> List[Dict]:
        """List jobs in insertion order, optionally filtered by status and employer."""
        sql = _JOB_SELECT + " WHERE 1=1"
        params: List[str] = []
        if status:
            sql += " AND j.status = ?"
            params.append(status)
        if employer:
            sql += " AND e.name_key = ?"
            params.append(employer_key(employer))
        sql += " ORDER BY j.id ASC"

        with self._lock:
            conn = self._get_conn()
            return [dict(row) for row in conn.execute(sql, params).fetchall()]

    def get_job_count(self) -> int:
        """Get total job count."""
        with self._lock:
            conn = self._get_conn()
            result = conn.execute("SELECT COUNT(*) FROM jobs").fetchone()
            return result[0] if result else 0

    def set_status(self, job_id: int, status: str) -> None:
        """Set a job's workflow status."""
        if status not in JOB_STATUSES:
            raise ValueError(f"Unknown status {status!r}; expected one of {', '.join(JOB_STATUSES)}")
        with self._lock:
            conn = self._get_conn()
            conn.execute(
                "UPDATE jobs SET status = ?, updated_at = ? WHERE id = ?",
                (status, now_utc_iso(), job_id),
            )
            conn.commit()

    def update_job_description(self, job_id: int, desc: JobDescription) -> None:
        """
        Store a fetched posting description and snapshot it.

        Pay and job code already known (e.g. from an alert email) are kept
        when the page yields none. A closed posting moves the job to 'closed'.
        """
        now = now_utc_iso()
        with self._lock:
            conn = self._get_conn()
            conn.execute("""
                UPDATE jobs SET
                    raw_text = ?,
                    pay_min = COALESCE(?, pay_min),
                    pay_max = COALESCE(?, pay_max),
                    job_code = COALESCE(?, job_code),
                    no_longer_accepting = ?,
                    status = CASE WHEN ? THEN 'closed' ELSE status END,
                    described_at = ?,
                    updated_at = ?
                WHERE id = ?
            """, (
                desc.text,
                desc.pay_min, desc.pay_max, desc.job_code,
                int(desc.no_longer_accepting),
                int(desc.no_longer_accepting),
                now, now,
                job_id,
            ))
            conn.execute(
                "INSERT INTO job_snapshots (job_id, raw_text, captured_at) VALUES (?, ?, ?)",
                (job_id, desc.text, now),
            )
            conn.commit()

    def get_jobs_without_descriptions(self, limit: Optional[int] = None, force: bool = False) -> List[Dict]:
        """Jobs with a URL whose posting page has not been fetched (all with a URL if force)."""
        sql = _JOB_SELECT + " WHERE j.url IS NOT NULL"
        if not force:
            sql += " AND j.described_at IS NULL"
        sql += " ORDER BY j.id ASC"
        params: List[int] = []
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        with self._lock:
            conn = self._get_conn()
            return [dict(row) for row in conn.execute(sql, params).fetchall()]

    def get_snapshots(self, job_id: int) -> List[Dict]:
        """All captured texts for a job, oldest first."""
        with self._lock:
            conn = self._get_conn()
            cursor = conn.execute(
                "SELECT id, job_id, raw_text, captured_at FROM job_snapshots WHERE job_id = ? ORDER BY id",
                (job_id,),
            )
            return [dict(row) for row in cursor.fetchall()]

    def delete_job(self, job_id: int) -> None:
        """Delete a job and its snapshots."""
        with self._lock:
            conn = self._get_conn()
            conn.execute("DELETE FROM job_snapshots WHERE job_id = ?", (job_id,))
            conn.execute("DELETE FROM jobs WHERE id = ?", (job_id,))
            conn.commit()

    # ----------------------------- Record lookup -----------------------------

    def records(self) -> List[ExistingRecordView]:
        """Every job as a record view, in insertion order."""
        with self._lock:
            conn = self._get_conn()
            rows = conn.execute(_RECORD_SELECT + " ORDER BY j.id ASC").fetchall()
            return [_to_record(row) for row in rows]

    def records_for_employer(self, employer: str) -> List[ExistingRecordView]:
        """Record views for one employer (case-insensitive), in insertion order."""
        with self._lock:
            conn = self._get_conn()
            rows = conn.execute(
                _RECORD_SELECT + " WHERE e.name_key = ? ORDER BY j.id ASC",
                (employer_key(employer),),
            ).fetchall()
            return [_to_record(row) for row in rows]

    def record_for_url(self, url: str) -> Optional[ExistingRecordView]:
        """The earliest record with exactly this URL, or None."""
        with self._lock:
            conn = self._get_conn()
            row = conn.execute(
                _RECORD_SELECT + " WHERE j.url = ? ORDER BY j.id ASC LIMIT 1",
                (url,),
            ).fetchone()
            return _to_record(row) if row else None

    # ----------------------------- Export -----------------------------

    def export_to_csv(self, path: str, status: Optional[str] = None) -> int:
        """
        Export jobs to CSV file.

        Returns number of rows exported.
        """
        jobs = self.list_jobs(status=status)
        if not jobs:
            return 0

        df = pd.DataFrame(jobs)
        df["no_longer_accepting"] = df["no_longer_accepting"].astype(bool)

        # Full descriptions make the sheet unreadable
        df = df.drop(columns=["raw_text"], errors="ignore")

        df.to_csv(path, index=False, encoding="utf-8")
        return len(df)
