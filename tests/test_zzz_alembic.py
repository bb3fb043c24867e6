"""Alembic migration tests.

File named test_zzz_alembic.py to sort LAST in pytest collection order.
"""

import os
import subprocess
import sys
from pathlib import Path

from sqlalchemy import create_engine, inspect

from codearena.db import models  # noqa: F401
from codearena.db.base import Base

REPO_ROOT = Path(__file__).resolve().parents[1]


def _alembic(db_path: Path, *args: str) -> subprocess.CompletedProcess[str]:
    env = {**os.environ, "ALEMBIC_DATABASE_URL": f"sqlite+aiosqlite:///{db_path}"}
    return subprocess.run(
        [sys.executable, "-m", "alembic", *args],
        capture_output=True,
        text=True,
        cwd=REPO_ROOT,
        env=env,
    )


def test_alembic_upgrade_head_matches_models(tmp_path: Path) -> None:
    """alembic upgrade head creates every table and column the models declare."""
    db_path = tmp_path / "migrated.db"
    result = _alembic(db_path, "upgrade", "head")
    assert result.returncode == 0, f"alembic upgrade failed: {result.stderr}"

    engine = create_engine(f"sqlite:///{db_path}")
    try:
        inspector = inspect(engine)
        assert set(inspector.get_table_names()) - {"alembic_version"} == set(Base.metadata.tables)
        for name, table in Base.metadata.tables.items():
            migrated = {column["name"] for column in inspector.get_columns(name)}
            assert migrated == set(table.columns.keys()), name
    finally:
        engine.dispose()


def test_alembic_downgrade_base(tmp_path: Path) -> None:
    db_path = tmp_path / "roundtrip.db"
    assert _alembic(db_path, "upgrade", "head").returncode == 0
    result = _alembic(db_path, "downgrade", "base")
    assert result.returncode == 0, f"alembic downgrade failed: {result.stderr}"

    result = _alembic(db_path, "current")
    assert result.returncode == 0
    assert "001_initial" not in result.stdout
