# solarstock/infra/db.py
"""
Conexão SQLite usada por migrações e repositórios.

Toda falha do driver (arquivo inacessível, tabela ausente, banco corrompido)
sai daqui como ``StoreUnavailableError``, para que quem chama consiga
distinguir "banco fora do ar" de "banco sem dados". Violações de
integridade (id duplicado, CHECK) passam como ``sqlite3.IntegrityError``:
são erro do chamador, não do banco.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator


class StoreUnavailableError(RuntimeError):
    """O banco não pôde ser aberto ou lido."""


def require_existing(db_path: str) -> None:
    """Leituras não criam banco: arquivo ausente é banco indisponível."""
    if not Path(db_path).is_file():
        raise StoreUnavailableError(f"banco não encontrado: {db_path}")


def _open(db_path: str) -> sqlite3.Connection:
    try:
        conn = sqlite3.connect(str(db_path))
    except sqlite3.Error as e:
        raise StoreUnavailableError(f"não foi possível abrir {db_path}: {e}") from e
    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
    except sqlite3.Error as e:
        conn.close()
        raise StoreUnavailableError(f"não foi possível abrir {db_path}: {e}") from e
    return conn


@contextmanager
def connect(db_path: str) -> Iterator[sqlite3.Connection]:
    """Conexão transacional: commit na saída normal, rollback em qualquer erro."""
    conn = _open(db_path)
    try:
        yield conn
        conn.commit()
    except sqlite3.IntegrityError:
        conn.rollback()
        raise
    except sqlite3.Error as e:
        conn.rollback()
        raise StoreUnavailableError(f"falha no banco {db_path}: {e}") from e
    except BaseException:
        conn.rollback()
        raise
    finally:
        conn.close()
