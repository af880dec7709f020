"""Repository layer: DB access helpers (SQLite).

Table helpers stay thin; ``procedures`` composes them into the named,
single-transaction calls the service layer binds against.
"""
from __future__ import annotations
