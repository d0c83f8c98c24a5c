import sqlite3
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from jobtracker.config import settings


class Base(DeclarativeBase):
    pass


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_path: Path | None = None):
    path = db_path or settings.db_path
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


SCHEMA_SQL = """\
-- ============================================================
-- RESUMES
-- ============================================================
CREATE TABLE IF NOT EXISTS resumes (
    id            TEXT PRIMARY KEY,
    name          TEXT NOT NULL,
    version_label TEXT,
    file_name     TEXT,
    created_at    TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

-- ============================================================
-- APPLICATIONS
-- ============================================================
CREATE TABLE IF NOT EXISTS applications (
    id                   TEXT PRIMARY KEY,
    company_name         TEXT NOT NULL,
    company_website      TEXT,
    company_size         TEXT CHECK(company_size IN ('startup','mid','enterprise')),
    job_title            TEXT NOT NULL,
    job_url              TEXT,
    job_description_raw  TEXT,
    salary_min           INTEGER CHECK(salary_min >= 0),
    salary_max           INTEGER CHECK(salary_max >= 0),
    salary_currency      TEXT DEFAULT 'EUR',
    compensation_type    TEXT CHECK(compensation_type IN ('annual','hourly','contract')),
    salary_not_specified INTEGER NOT NULL DEFAULT 0,
    location_city        TEXT,
    location_country     TEXT,
    work_mode            TEXT CHECK(work_mode IN ('remote','hybrid','on-site')),
    status               TEXT NOT NULL DEFAULT 'saved'
                         CHECK(status IN ('saved','applied','phone_screen','technical_interview',
                                          'final_round','offer','accepted','rejected','withdrawn')),
    date_applied         TEXT,
    date_added           TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    match_score          INTEGER CHECK(match_score >= 1 AND match_score <= 5),
    source               TEXT CHECK(source IN ('linkedin','indeed','company_site',
                                               'referral','job_board','other')),
    contact_name         TEXT,
    contact_email        TEXT,
    contact_role         TEXT,
    notes                TEXT,
    priority             TEXT NOT NULL DEFAULT 'medium' CHECK(priority IN ('high','medium','low')),
    follow_up_date       TEXT,
    resume_id            TEXT REFERENCES resumes(id) ON DELETE SET NULL,
    cover_letter_notes   TEXT,
    updated_at           TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    CHECK(salary_min IS NULL OR salary_max IS NULL OR salary_min <= salary_max)
);

CREATE INDEX IF NOT EXISTS idx_applications_status ON applications(status);
CREATE INDEX IF NOT EXISTS idx_applications_date_added ON applications(date_added);
CREATE INDEX IF NOT EXISTS idx_applications_company ON applications(company_name);

-- ============================================================
-- STATUS HISTORY (append-only)
-- ============================================================
CREATE TABLE IF NOT EXISTS status_history (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    application_id TEXT NOT NULL REFERENCES applications(id) ON DELETE CASCADE,
    from_status    TEXT,
    to_status      TEXT NOT NULL
                   CHECK(to_status IN ('saved','applied','phone_screen','technical_interview',
                                       'final_round','offer','accepted','rejected','withdrawn')),
    changed_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now')),
    notes          TEXT
);

CREATE INDEX IF NOT EXISTS idx_status_history_application ON status_history(application_id);
CREATE INDEX IF NOT EXISTS idx_status_history_changed ON status_history(application_id, changed_at);

-- ============================================================
-- TAGS
-- ============================================================
CREATE TABLE IF NOT EXISTS tags (
    id       TEXT PRIMARY KEY,
    name     TEXT NOT NULL,
    -- casefolded name; SQLite's NOCASE only folds ASCII
    name_key TEXT NOT NULL UNIQUE,
    color    TEXT
);

CREATE TABLE IF NOT EXISTS application_tags (
    application_id TEXT NOT NULL REFERENCES applications(id) ON DELETE CASCADE,
    tag_id         TEXT NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
    PRIMARY KEY (application_id, tag_id)
);

-- ============================================================
-- COVER LETTERS
-- ============================================================
CREATE TABLE IF NOT EXISTS cover_letters (
    id             TEXT PRIMARY KEY,
    application_id TEXT REFERENCES applications(id) ON DELETE SET NULL,
    title          TEXT,
    content        TEXT NOT NULL,
    created_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_cover_letters_application ON cover_letters(application_id);
"""


def init_db(db_path: Path | None = None):
    path = db_path or settings.db_path
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(SCHEMA_SQL)
    finally:
        conn.close()
