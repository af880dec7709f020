from __future__ import annotations

# lifesprints/db.py
import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterator

import yaml

# DB 路径解析顺序：
# 1) 环境变量 LIFESPRINTS_DB_PATH（最高优先级）
# 2) config.yaml 的 test_db_path（当检测到测试环境时）
# 3) config.yaml 的 db_path（生产默认）
# 4) 兜底：项目根 lifesprints.db
_PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
_ROOT_DB = os.path.join(_PROJECT_ROOT, "lifesprints.db")
DEFAULT_TIMEOUT = 5.0

# hours columns are NUMERIC(5,2); values are validated to 2 places before binding
sqlite3.register_adapter(Decimal, float)


@dataclass(frozen=True)
class DbConfig:
    """Connection settings handed to the data-access layer at startup."""
    path: str
    timeout: float = DEFAULT_TIMEOUT


def _read_config_yaml() -> dict:
    cfg_path = os.path.join(_PROJECT_ROOT, "config.yaml")
    if not os.path.exists(cfg_path):
        return {}
    with open(cfg_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    out = {}
    for k in ("db_path", "test_db_path"):
        v = cfg.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()
    if cfg.get("db_timeout") is not None:
        out["db_timeout"] = float(cfg["db_timeout"])
    return out


def get_db_path() -> str:
    env_path = os.environ.get("LIFESPRINTS_DB_PATH")
    cfg = _read_config_yaml()
    cfg_db = cfg.get("db_path")
    cfg_test = cfg.get("test_db_path")
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if env_path:
        path = env_path
    elif is_test and cfg_test:
        path = cfg_test
    elif cfg_db:
        path = cfg_db
    else:
        path = _ROOT_DB

    # 确保目录存在
    dirn = os.path.dirname(path) or "."
    os.makedirs(dirn, exist_ok=True)
    return path


def load_db_config() -> DbConfig:
    env_timeout = os.environ.get("LIFESPRINTS_DB_TIMEOUT")
    if env_timeout:
        timeout = float(env_timeout)
    else:
        timeout = _read_config_yaml().get("db_timeout", DEFAULT_TIMEOUT)
    return DbConfig(path=get_db_path(), timeout=timeout)


@contextmanager
def get_conn(config: DbConfig | None = None) -> Iterator[sqlite3.Connection]:
    """
    获取 SQLite 连接。优先使用显式传入的 config，否则走 load_db_config()。
    打开 foreign_keys，设置 row_factory 为 Row。连接在退出时总是关闭。
    """
    cfg = config or load_db_config()
    conn = sqlite3.connect(
        cfg.path,
        timeout=cfg.timeout,
        check_same_thread=False,
        isolation_level=None,
    )
    try:
        conn.execute("PRAGMA foreign_keys = ON;")
        conn.row_factory = sqlite3.Row
        yield conn
    finally:
        conn.close()


@contextmanager
def atomic(conn: sqlite3.Connection, immediate: bool = True) -> Iterator[sqlite3.Connection]:
    """Run the enclosed statements as one transaction; roll back on any error.

    immediate=True takes the write lock at BEGIN (BEGIN IMMEDIATE).
    """
    conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
    try:
        yield conn
    except BaseException:
        conn.rollback()
        raise
    conn.commit()
