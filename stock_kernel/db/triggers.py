"""
Module: stock_kernel.db.triggers
Responsibility: Loading, installing, and verifying PostgreSQL immutability
    triggers for the movement ledger.  This is the database-level complement
    to the ORM-level listeners in db/immutability.py.
Architecture position: Kernel > DB.  May import from db/ only (pathlib for
    SQL file loading, sqlalchemy for execution).  MUST NOT import from
    models/, services/, selectors/, domain/, or outer layers.

Invariants enforced:
    - movement_records rows: no UPDATE, no DELETE, ever.

Failure modes:
    - PostgreSQL RAISE EXCEPTION on any trigger violation (surfaced as
      InternalError/ProgrammingError by SQLAlchemy).
    - FileNotFoundError if SQL files are missing from the sql/ directory.
"""

from pathlib import Path

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Engine

# Directory containing SQL trigger files
SQL_DIR = Path(__file__).parent / "sql"

# Ordered list of trigger files to install (numbered for predictable order)
TRIGGER_FILES = [
    "01_movement_record.sql",
]

DROP_FILE = "99_drop_all.sql"

ALL_TRIGGER_NAMES = [
    "trg_movement_record_immutability_update",
    "trg_movement_record_immutability_delete",
]


def _load_sql_file(filename: str) -> str:
    """
    Load SQL content from a file in the sql/ directory.

    Raises:
        FileNotFoundError: If the file doesn't exist.
    """
    filepath = SQL_DIR / filename
    return filepath.read_text(encoding="utf-8")


def _load_all_trigger_sql() -> str:
    """Load and concatenate all trigger SQL files in numbered order."""
    sql_parts = []
    for filename in TRIGGER_FILES:
        sql_parts.append(f"-- Loading: {filename}")
        sql_parts.append(_load_sql_file(filename))
        sql_parts.append("")
    return "\n".join(sql_parts)


def install_immutability_triggers(engine: Engine) -> None:
    """
    Install database-level immutability triggers.

    Preconditions: Tables must exist (call after create_all()).
        Engine must be connected to PostgreSQL.
    Postconditions: All triggers in ALL_TRIGGER_NAMES are installed.
        Trigger functions use CREATE OR REPLACE (idempotent).
    """
    sql_content = _load_all_trigger_sql()

    with engine.connect().execution_options(no_parameters=True) as conn:
        conn.exec_driver_sql(sql_content)
        conn.commit()


def uninstall_immutability_triggers(engine: Engine) -> None:
    """
    Remove database-level immutability triggers.

    WARNING: Only for test teardown and schema migrations.  Re-install
    immediately afterwards.
    """
    sql_content = _load_sql_file(DROP_FILE)

    with engine.connect().execution_options(no_parameters=True) as conn:
        conn.exec_driver_sql(sql_content)
        conn.commit()


def get_installed_triggers(engine: Engine) -> list[str]:
    """Get the list of installed ledger immutability triggers."""
    stmt = text(
        "SELECT tgname FROM pg_trigger WHERE tgname IN :names ORDER BY tgname"
    ).bindparams(bindparam("names", expanding=True))

    with engine.connect() as conn:
        result = conn.execute(stmt, {"names": ALL_TRIGGER_NAMES})
        return [row[0] for row in result]


def triggers_installed(engine: Engine) -> bool:
    """Check if all ledger immutability triggers are installed."""
    return len(get_installed_triggers(engine)) == len(ALL_TRIGGER_NAMES)
