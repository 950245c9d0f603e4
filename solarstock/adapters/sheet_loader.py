# solarstock/adapters/sheet_loader.py
"""
Loaders para planilhas (XLSX ou CSV) de movimentações de estoque e de
linhas de BOM informadas à mão.

Essas funções:
- leem planilhas usando pandas;
- normalizam cabeçalhos (maiúsculas, pontuação, sinônimos);
- retornam listas de dicionários com as chaves esperadas pelos casos de uso.

Observações:
- Não convertem quantidades de linhas de BOM: o texto é preservado em
  ``quantity`` e interpretado depois, sem nunca falhar.
- Datas são normalizadas para ISO (YYYY-MM-DD) quando possível.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd


# ---------------------------
# utilitários de normalização
# ---------------------------

def _slug(s: str) -> str:
    """Normaliza cabeçalhos: minúsculas, sem não-alfanumérico."""
    if s is None:
        return ""
    s = str(s).strip().lower()
    s = re.sub(r"[^a-z0-9]+", " ", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s


def _safe_get(row, key) -> Optional[str]:
    """Lê um valor da linha do pandas tratando NA e strings vazias."""
    val = row.get(key)
    if val is None or pd.isna(val):
        return None
    s = str(val).strip()
    return s or None


def _to_date_iso(val: Any) -> Optional[str]:
    """Converte valor para data ISO (YYYY-MM-DD) se possível."""
    if val is None:
        return None
    d = pd.to_datetime(str(val).strip(), dayfirst=True, errors="coerce")
    if pd.isna(d):
        return None
    return d.date().isoformat()


_ALIASES = {
    # movimentações
    "item": "item",
    "material": "item",
    "product": "item",

    "type": "type",
    "description": "type",
    "desc": "type",
    "specification": "type",

    "brand": "brand",
    "make": "brand",

    "qty": "quantity",
    "quantity": "quantity",
    "qtd": "quantity",

    "kind": "kind",
    "direction": "kind",
    "in out": "kind",
    "movement": "kind",

    "rate": "rate",
    "price": "rate",
    "unit price": "rate",

    "source": "source",
    "supplier": "supplier",
    "vendor": "supplier",

    "date": "date",
    "timestamp": "date",

    # linhas de BOM
    "sr": "sr",
    "sr no": "sr",
    "s no": "sr",
    "unit": "unit",
    "uom": "unit",
}


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Renomeia colunas com base em sinônimos/variações."""
    new_cols = {}
    for col in df.columns:
        key = _slug(col)
        new_cols[col] = _ALIASES.get(key, key)  # se não houver alias, mantém slug
    return df.rename(columns=new_cols)


def _read_sheet(path: str) -> pd.DataFrame:
    """Lê XLSX ou CSV preservando tudo como texto."""
    if Path(path).suffix.lower() == ".csv":
        df = pd.read_csv(path, dtype="string", keep_default_na=True)
    else:
        df = pd.read_excel(path, dtype="string")
    return _normalize_columns(df)


# ---------------------------
# loaders públicos
# ---------------------------

def load_events_from_sheet(path: str) -> List[Dict[str, Any]]:
    """Lê uma planilha de movimentações de estoque.

    Campos de saída (chaves do dict por linha):
      - item: str | None
      - type: str | None
      - brand: str | None (vazio vira 'standard' na construção do evento)
      - quantity: str | None (texto original)
      - kind: 'IN' | 'OUT' | None
      - rate: str | None
      - source / supplier: str | None
      - date: ISO date | None
    """
    df = _read_sheet(path)
    out: List[Dict[str, Any]] = []
    for _, row in df.iterrows():
        kind = _safe_get(row, "kind")
        out.append(
            {
                "item": _safe_get(row, "item"),
                "type": _safe_get(row, "type"),
                "brand": _safe_get(row, "brand"),
                "quantity": _safe_get(row, "quantity"),
                "kind": kind.upper() if kind else None,
                "rate": _safe_get(row, "rate"),
                "source": _safe_get(row, "source"),
                "supplier": _safe_get(row, "supplier"),
                "date": _to_date_iso(_safe_get(row, "date")),
            }
        )
    return out


def load_material_lines_from_sheet(path: str) -> List[Dict[str, Any]]:
    """Lê uma planilha de linhas de BOM (sr, item, description, make, qty, unit).

    Linhas sem item são descartadas. A coluna ``description`` da planilha
    pode vir como "type" ou "description".
    """
    df = _read_sheet(path)
    out: List[Dict[str, Any]] = []
    for _, row in df.iterrows():
        item = _safe_get(row, "item")
        if not item:
            continue
        out.append(
            {
                "sr": _safe_get(row, "sr"),
                "item": item,
                "description": _safe_get(row, "type") or "",
                "make": _safe_get(row, "brand") or "",
                "quantity": _safe_get(row, "quantity"),
                "unit": _safe_get(row, "unit") or "",
            }
        )
    return out
