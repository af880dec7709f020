import os
import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "lifesprints_test.db"
    # Point the app to this temp DB
    os.environ["LIFESPRINTS_DB_PATH"] = str(path)
    # Initialize schema
    from lifesprints.repository.schema import read_schema
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(read_schema())
        conn.commit()
    finally:
        conn.close()
    return str(path)


@pytest.fixture()
def db_config(tmp_db_path):
    from lifesprints.db import DbConfig
    return DbConfig(path=tmp_db_path, timeout=1.0)


@pytest.fixture()
def svc(db_config):
    from lifesprints.services.stored_procedure_svc import StoredProcedureService
    return StoredProcedureService(db_config)


@pytest.fixture()
def client(svc):
    from fastapi.testclient import TestClient
    from lifesprints.api import app
    from lifesprints.routes.stories import get_sp_service
    app.dependency_overrides[get_sp_service] = lambda: svc
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Clean tables before each test for isolation
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert os.environ.get("LIFESPRINTS_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    tables = [
        "stories",
        "users",
        "operation_log",
    ]
    conn = sqlite3.connect(tmp_db_path)
    try:
        for t in tables:
            conn.execute(f"DELETE FROM {t}")
        conn.commit()
    finally:
        conn.close()
    yield
