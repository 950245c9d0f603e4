"""
Utilidades de parsing para valores numéricos em texto livre.

Este módulo fornece funções para interpretar os campos digitados pelos
usuários nas especificações de projeto e nas linhas de BOM editadas à mão
(por exemplo, "45 mtr", "approx 30m" ou "12,5"). Nenhuma função daqui
levanta exceção: entradas malformadas degradam para ``0.0`` ou ``None``.
"""

from __future__ import annotations

import math
import re
from typing import Any, Optional

_NUM_RE = re.compile(r"[-+]?\d+(?:[.,]\d+)?")
_DIGITS_RE = re.compile(r"[\d.]+")
_LEADING_FLOAT_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def parse_wire_length(txt: Any) -> float:
    """Extrai o comprimento (em metros) de um campo de fio em texto livre.

    Todos os dígitos e pontos do texto são concatenados e o maior prefixo
    numérico válido é interpretado. Sem nenhum dígito, retorna ``0.0``.

    Exemplos:
        "45 mtr"      → 45.0
        "approx 30m"  → 30.0
        "12.5 m"      → 12.5
        "N/A"         → 0.0
    """
    if txt is None:
        return 0.0
    if isinstance(txt, (int, float)) and not isinstance(txt, bool):
        val = float(txt)
        return val if math.isfinite(val) else 0.0
    chunks = _DIGITS_RE.findall(str(txt))
    if not chunks:
        return 0.0
    m = _LEADING_FLOAT_RE.match("".join(chunks))
    if not m:
        return 0.0
    return float(m.group(0))


def parse_quantity(value: Any) -> Optional[float]:
    """Interpreta a quantidade de uma linha de material.

    Returns:
        O valor numérico, ou ``None`` quando a quantidade está em branco ou
        não contém número algum. Vírgula é aceita como separador decimal.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        val = float(value)
        return val if math.isfinite(val) else None
    s = str(value).strip()
    if not s:
        return None
    m = _NUM_RE.search(s)
    if not m:
        return None
    try:
        return float(m.group(0).replace(",", "."))
    except ValueError:
        return None


def parse_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    """Converte para float, devolvendo ``default`` quando não for possível."""
    if value is None:
        return default
    try:
        val = float(str(value).strip().replace(",", "."))
    except ValueError:
        return default
    return val if math.isfinite(val) else default
