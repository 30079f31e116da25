"""Console entry points wrapping Alembic for the SmartWhale schema.

    db-generate -m "add subscription table"
    db-migrate            # upgrade to head
    db-migrate 0001       # upgrade (or stay) at a given revision
    db-rollback           # step back one revision
    db-status             # print the current revision
"""
import subprocess
import sys
from pathlib import Path

# alembic.ini sits at the repository root: src/smartwhale/db/cli.py -> ../../../
ALEMBIC_DIR = Path(__file__).resolve().parents[3]


def _alembic(*args: str) -> int:
    """Invoke alembic in ALEMBIC_DIR and return its exit code."""
    completed = subprocess.run(
        [sys.executable, "-m", "alembic", *args],
        cwd=ALEMBIC_DIR,
        check=False,
    )
    return completed.returncode


def generate() -> None:
    """Autogenerate a revision from the SQLModel metadata."""
    sys.exit(_alembic("revision", "--autogenerate", *sys.argv[1:]))


def migrate() -> None:
    """Upgrade to head, or to the revision given as the first argument."""
    target, *rest = sys.argv[1:] or ["head"]
    sys.exit(_alembic("upgrade", target, *rest))


def rollback() -> None:
    """Downgrade one revision (or to the revision given as the first argument)."""
    target, *rest = sys.argv[1:] or ["-1"]
    sys.exit(_alembic("downgrade", target, *rest))


def status() -> None:
    """Print the revision the database is currently at."""
    sys.exit(_alembic("current", "--verbose"))
