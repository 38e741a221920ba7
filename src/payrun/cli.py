import os
import sys
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import typer

from payrun.config import settings
from payrun.logging import logger, get_run_id

app = typer.Typer(no_args_is_help=True)

@app.callback()
def main():
    """
    Payrun payroll CLI.
    """
    pass

def _sqlite_path(url: str) -> Path | None:
    if url.startswith("sqlite:///"):
        return Path(url[len("sqlite:///"):])
    return None

@app.command(name="doctor")
def doctor():
    """
    Check configuration and environment health.
    """
    logger.info("Running doctor check...")

    failures: list[str] = []
    passed = 0

    print("\n🩺 Payrun Doctor\n")

    # ── Check 1: Environment / Interpreter ──────────────────────────────────
    print("[Environment]")
    print(f"  Python: {sys.version.split()[0]}")
    print(f"  Prefix: {sys.prefix}")
    print(f"  Run ID: {get_run_id()}")
    passed += 1

    # ── Check 2: Calendar settings ──────────────────────────────────────────
    print("\n[Configuration]")
    try:
        ZoneInfo(settings.TIMEZONE)
        print(f"  PAYRUN_TIMEZONE:             ✅ {settings.TIMEZONE}")
        passed += 1
    except (ZoneInfoNotFoundError, ValueError):
        print(f"  PAYRUN_TIMEZONE:             ❌ Unknown zone {settings.TIMEZONE!r}")
        failures.append(f"PAYRUN_TIMEZONE={settings.TIMEZONE!r} is not an IANA time zone")

    if settings.SEMI_MONTHLY_MAX_DAYS > 0:
        print(f"  PAYRUN_SEMI_MONTHLY_MAX_DAYS: ✅ {settings.SEMI_MONTHLY_MAX_DAYS}")
        passed += 1
    else:
        print(f"  PAYRUN_SEMI_MONTHLY_MAX_DAYS: ❌ {settings.SEMI_MONTHLY_MAX_DAYS}")
        failures.append("PAYRUN_SEMI_MONTHLY_MAX_DAYS must be positive")

    print(f"  PAYRUN_LEDGER_DUE_DAYS:      {settings.LEDGER_DUE_DAYS}")
    print(f"  PAYRUN_LOG_LEVEL:            {settings.LOG_LEVEL}")

    # ── Check 3: Data directory ──────────────────────────────────────────────
    print("\n[Data Directory]")
    data_dir = Path(settings.DATA_DIR)
    if data_dir.exists() and data_dir.is_dir():
        print(f"  {settings.DATA_DIR}/  ✅ Found: {data_dir.absolute()}")
        passed += 1
    else:
        print(f"  {settings.DATA_DIR}/  ❌ Missing: {data_dir.absolute()}")
        failures.append(f"{data_dir.absolute()} not found; run `mkdir {settings.DATA_DIR}`")

    # ── Check 4: DB file / directory writability ─────────────────────────────
    print("\n[Database]")
    db_file = _sqlite_path(settings.DATABASE_URL)
    if db_file is None:
        print(f"  {settings.DATABASE_URL.split('://')[0]} database  ⚠️  Skipped (not SQLite)")
    elif db_file.exists():
        if os.access(db_file, os.W_OK):
            print(f"  {db_file}  ✅ Exists and writable")
            passed += 1
        else:
            print(f"  {db_file}  ❌ Exists but NOT writable")
            failures.append(f"{db_file} exists but is not writable; check file permissions")
    elif db_file.parent.exists():
        if os.access(db_file.parent, os.W_OK):
            print(f"  {db_file}  ✅ Does not exist yet; directory is writable (db init can create it)")
            passed += 1
        else:
            print(f"  {db_file}  ❌ {db_file.parent} is not writable")
            failures.append(f"{db_file.parent} is not writable; db init cannot create {db_file.name}")
    else:
        print(f"  {db_file}  ⚠️  Skipped ({db_file.parent} missing)")

    # ── Summary ──────────────────────────────────────────────────────────────
    total = passed + len(failures)
    print(f"\n{'─' * 50}")
    if failures:
        print(f"Result: {passed}/{total} checks passed\n")
        for msg in failures:
            print(f"  ❌ {msg}")
        print()
        raise typer.Exit(code=1)
    else:
        print(f"Result: {passed}/{total} checks passed, all good ✅")
        print()


@app.command(name="statutory")
def statutory(
    salary: float = typer.Argument(..., help="Monthly basic salary."),
    semi_monthly: bool = typer.Option(False, "--semi-monthly", help="Show the per-cutoff half as well."),
):
    """Show SSS, PhilHealth, Pag-IBIG and withholding tax for a monthly salary."""
    from payrun.calc.statutory import monthly_statutory

    if salary < 0:
        print("❌ Salary must not be negative.")
        raise typer.Exit(code=1)

    figures = monthly_statutory(salary)
    rows = [
        ("SSS", figures.sss.employee_share, figures.sss.employer_share),
        ("PhilHealth", figures.philhealth.employee_share, figures.philhealth.employer_share),
        ("Pag-IBIG", figures.pagibig.employee_share, figures.pagibig.employer_share),
        ("Withholding Tax", figures.withholding_tax, 0.0),
    ]
    print(f"\nMonthly salary: {salary:,.2f}")
    if figures.sss.monthly_salary_credit is not None:
        print(f"SSS salary credit: {figures.sss.monthly_salary_credit:,.2f}")
    header = f"{'':<18}{'Employee':>12}{'Employer':>12}"
    if semi_monthly:
        header += f"{'Per cutoff':>12}"
    print(header)
    for name, employee, employer in rows:
        line = f"{name:<18}{employee:>12,.2f}{employer:>12,.2f}"
        if semi_monthly:
            line += f"{employee / 2:>12,.2f}"
        print(line)
    total = sum(r[1] for r in rows)
    print(f"{'Total':<18}{total:>12,.2f}")
    print()


@app.command(name="serve")
def serve(
    host: str = typer.Option(None, help="Bind address (default: PAYRUN_API_HOST)."),
    port: int = typer.Option(None, help="Port (default: PAYRUN_API_PORT)."),
    reload: bool = typer.Option(False, help="Reload on code changes."),
):
    """Run the HTTP API."""
    import uvicorn

    host = host or settings.API_HOST
    port = port or settings.API_PORT
    logger.info("Serving payrun API on %s:%s", host, port)
    uvicorn.run("payrun.api.app:create_app", factory=True, host=host, port=port, reload=reload)


db_app = typer.Typer(help="Database management commands.")
app.add_typer(db_app, name="db")

@db_app.command("init")
def init():
    """Initialize the database tables."""
    from payrun.db import init_db
    try:
        init_db()
        logger.info("Database initialized successfully.")
        print("✅ Database initialized.")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        print(f"❌ Failed: {e}")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
