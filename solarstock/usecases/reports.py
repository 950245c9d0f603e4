# solarstock/usecases/reports.py
"""
Relatórios de estoque:
- saldo atual por (item, tipo, marca)
- necessidades agregadas dos projetos, com clientes
"""

from __future__ import annotations

from typing import Dict, List

from solarstock.config import DB_PATH
from solarstock.domain.ledger import compute_balance
from solarstock.infra.logger import log_system_event
from solarstock.usecases.check_stock import load_snapshot, requirements_from_snapshot


def relatorio_saldos(db_path: str = DB_PATH, incluir_zerados: bool = False) -> List[Dict]:
    """Saldo de cada chave do livro, ordenado por item/tipo/marca."""
    snap = load_snapshot(db_path)
    balances = compute_balance(snap.events)
    out: List[Dict] = []
    for key in sorted(balances, key=lambda k: k.sort_tuple()):
        qty = balances[key]
        if not incluir_zerados and qty == 0:
            continue
        out.append({"item": key.item, "type": key.type, "brand": key.brand, "quantity": qty})
    log_system_event("relatorio_saldos", {"linhas": len(out)})
    return out


def relatorio_necessidades(db_path: str = DB_PATH) -> List[Dict]:
    """Necessidade total por chave, com saldo atual e clientes."""
    snap = load_snapshot(db_path)
    required = requirements_from_snapshot(snap)
    balances = compute_balance(snap.events)
    out: List[Dict] = []
    for key in sorted(required, key=lambda k: k.sort_tuple()):
        agg = required[key]
        out.append(
            {
                "item": key.item,
                "type": key.type,
                "brand": key.brand,
                "required": agg.total,
                "current": balances.get(key, 0.0),
                "consumers": ", ".join(sorted(agg.consumers)),
            }
        )
    log_system_event("relatorio_necessidades", {"linhas": len(out)})
    return out
