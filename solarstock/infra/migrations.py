# solarstock/infra/migrations.py
"""
Schema do banco, versionado por ``PRAGMA user_version``.

V1: params (inclui o blob de limites), projetos, linhas de material e livro
    de estoque.
V2: campos descritivos do projeto (pernas, telhado, painel) e marca no livro.

Cada versão roda uma única vez; rodar ``apply_migrations`` de novo é seguro.
"""

from __future__ import annotations

import sqlite3
from typing import Callable, List, Tuple

from .db import connect

SCHEMA_V1: List[str] = [
    # Parâmetros K/V (inclui o blob de limites de alerta)
    """
    CREATE TABLE IF NOT EXISTS params (
        chave TEXT PRIMARY KEY,
        valor TEXT
    );
    """,
    # Especificações de projeto (registro de BOM)
    """
    CREATE TABLE IF NOT EXISTS project_spec (
        id TEXT PRIMARY KEY,
        customer TEXT NOT NULL,
        capacity_kw REAL,
        panel_wattage REAL,
        table_option TEXT NOT NULL,
        phase TEXT NOT NULL CHECK (phase IN ('SINGLE', 'TRIPLE')),
        ac_wire TEXT,
        dc_wire TEXT,
        la_wire TEXT,
        earthing_wire TEXT,
        legs INTEGER DEFAULT 0,
        created_at TEXT NOT NULL
    );
    """,
    # Linhas informadas pelo usuário (BOM Custom ou editada)
    """
    CREATE TABLE IF NOT EXISTS material_line (
        spec_id TEXT NOT NULL,
        serial INTEGER NOT NULL,
        item TEXT NOT NULL,
        description TEXT,
        make TEXT,
        quantity TEXT,
        unit TEXT,
        PRIMARY KEY (spec_id, serial),
        FOREIGN KEY (spec_id) REFERENCES project_spec(id) ON DELETE CASCADE
    );
    """,
    # Livro de estoque (append-only; remoção só por id)
    """
    CREATE TABLE IF NOT EXISTS stock_event (
        id TEXT PRIMARY KEY,
        timestamp TEXT NOT NULL,
        item TEXT NOT NULL,
        type TEXT NOT NULL,
        quantity REAL NOT NULL,
        kind TEXT NOT NULL CHECK (kind IN ('IN', 'OUT')),
        rate REAL DEFAULT 0,
        source TEXT,
        supplier TEXT
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_event_item ON stock_event(item);",
    "CREATE INDEX IF NOT EXISTS idx_event_timestamp ON stock_event(timestamp);",
    "CREATE INDEX IF NOT EXISTS idx_spec_created ON project_spec(created_at);",
]


def _ensure_column(conn: sqlite3.Connection, table: str, column: str, ddl: str) -> None:
    existing = {row["name"] for row in conn.execute(f"PRAGMA table_info({table});")}
    if column not in existing:
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {ddl};")

def _v1_base_tables(conn: sqlite3.Connection) -> None:
    for stmt in SCHEMA_V1:
        conn.execute(stmt)

def _v2_descriptive_columns(conn: sqlite3.Connection) -> None:
    for column in ("front_leg", "back_leg", "roof_design", "panel_name"):
        _ensure_column(conn, "project_spec", column, "TEXT")
    _ensure_column(conn, "stock_event", "brand", "TEXT DEFAULT 'standard'")

MIGRATIONS: List[Tuple[int, Callable[[sqlite3.Connection], None]]] = [
    (1, _v1_base_tables),
    (2, _v2_descriptive_columns),
]

SCHEMA_VERSION = MIGRATIONS[-1][0]

def apply_migrations(db_path: str) -> int:
    """Leva o banco até ``SCHEMA_VERSION``; devolve a versão final."""
    with connect(db_path) as conn:
        current = conn.execute("PRAGMA user_version;").fetchone()[0] or 0
        for version, step in MIGRATIONS:
            if current < version:
                step(conn)
                conn.execute(f"PRAGMA user_version = {version};")
                current = version
    return current
