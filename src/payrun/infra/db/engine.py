"""Re-export the singleton engine from payrun.db and register SQLite pragmas."""
from sqlalchemy import event
from payrun.db import engine          # singleton; created once at payrun.db import
import payrun.models  # noqa: F401   # registers all ORM table mappers


def _set_sqlite_pragmas(dbapi_conn, _):
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA journal_mode=WAL")
    cur.execute("PRAGMA synchronous=NORMAL")
    cur.execute("PRAGMA foreign_keys=ON")
    cur.close()


if engine.dialect.name == "sqlite":
    event.listen(engine, "connect", _set_sqlite_pragmas)

__all__ = ["engine"]
