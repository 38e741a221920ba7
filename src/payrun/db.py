"""Engine singleton and table bootstrap."""
from __future__ import annotations

from pathlib import Path

from sqlmodel import SQLModel, create_engine

from payrun.config import settings

DATA_DIR = Path(settings.DATA_DIR)

if settings.DATABASE_URL.startswith("sqlite:///"):
    DATA_DIR.mkdir(parents=True, exist_ok=True)

engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {},
)


def init_db() -> None:
    """Create all tables and apply additive compatibility upgrades."""
    import payrun.models  # noqa: F401  register ORM mappers
    from payrun.infra.db.schema_compat import ensure_schema_compat

    SQLModel.metadata.create_all(engine)
    ensure_schema_compat(engine)
