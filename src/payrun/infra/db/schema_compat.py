"""Runtime DB compatibility helpers for legacy SQLite schemas.

These helpers backfill additive schema changes for deployments that still rely
on ``SQLModel.metadata.create_all()`` instead of migrations.
"""

from __future__ import annotations

import logging

from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)


def ensure_schema_compat(engine: Engine) -> None:
    """Apply additive compatibility upgrades for existing SQLite databases."""
    if engine.dialect.name != "sqlite":
        return

    with engine.begin() as conn:
        _ensure_payrollrun_columns(conn)
        _ensure_payslip_cutoff_columns(conn)
        _normalize_processing_runs(conn)


_PAYROLLRUN_COLUMNS = {
    "deductions_enabled": "BOOLEAN NOT NULL DEFAULT 1",
    "night_diff_rate": "FLOAT",
    "notes": "JSON NOT NULL DEFAULT '[]'",
}


def _ensure_payrollrun_columns(conn: Connection) -> None:
    if not _table_exists(conn, "payrollrun"):
        return

    for column, ddl in _PAYROLLRUN_COLUMNS.items():
        if not _column_exists(conn, "payrollrun", column):
            conn.execute(text(f"ALTER TABLE payrollrun ADD COLUMN {column} {ddl}"))
            logger.info("Applied compatibility upgrade: added payrollrun.%s", column)


def _ensure_payslip_cutoff_columns(conn: Connection) -> None:
    """Older payslips only carried a period label; copy the run's cutoff onto them."""
    if not _table_exists(conn, "payslip"):
        return

    added = False
    for column in ("cutoff_start", "cutoff_end"):
        if not _column_exists(conn, "payslip", column):
            conn.execute(text(f"ALTER TABLE payslip ADD COLUMN {column} DATE"))
            logger.info("Applied compatibility upgrade: added payslip.%s", column)
            added = True

    if not _column_exists(conn, "payslip", "carried_pending"):
        conn.execute(text("ALTER TABLE payslip ADD COLUMN carried_pending FLOAT"))
        logger.info("Applied compatibility upgrade: added payslip.carried_pending")

    if added and _table_exists(conn, "payrollrun"):
        conn.execute(text(
            "UPDATE payslip SET "
            "cutoff_start = (SELECT cutoff_start FROM payrollrun WHERE payrollrun.id = payslip.payroll_run_id), "
            "cutoff_end = (SELECT cutoff_end FROM payrollrun WHERE payrollrun.id = payslip.payroll_run_id) "
            "WHERE cutoff_start IS NULL"
        ))

    _ensure_index(conn, "ix_payslip_cutoff_start", "payslip", "cutoff_start")


def _normalize_processing_runs(conn: Connection) -> None:
    """Runs left in the retired transient 'processing' state become drafts."""
    if not _table_exists(conn, "payrollrun"):
        return

    result = conn.execute(text(
        "UPDATE payrollrun SET status = 'DRAFT' "
        "WHERE status IN ('processing', 'PROCESSING')"
    ))
    if result.rowcount:
        logger.info("Normalized %d legacy 'processing' payroll runs to draft", result.rowcount)


def _table_exists(conn: Connection, table_name: str) -> bool:
    return (
        conn.execute(
            text(
                "SELECT 1 FROM sqlite_master "
                "WHERE type = 'table' AND name = :name LIMIT 1"
            ),
            {"name": table_name},
        ).first()
        is not None
    )


def _column_exists(conn: Connection, table_name: str, column_name: str) -> bool:
    rows = conn.execute(text(f"PRAGMA table_info({table_name})")).fetchall()
    return any(row[1] == column_name for row in rows)


def _ensure_index(
    conn: Connection, index_name: str, table_name: str, column_name: str
) -> None:
    exists = conn.execute(
        text(
            "SELECT 1 FROM sqlite_master "
            "WHERE type = 'index' AND name = :name LIMIT 1"
        ),
        {"name": index_name},
    ).first()
    if exists is None:
        conn.execute(text(f"CREATE INDEX {index_name} ON {table_name} ({column_name})"))
