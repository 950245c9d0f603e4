# solarstock/usecases/consume_bom.py
"""
UC: Baixa de estoque de um projeto (stock-out da BOM).

Cada linha efetiva do projeto com tipo preenchido e quantidade numérica
positiva vira um evento OUT no livro, com a mesma chave (item, tipo, marca)
usada na agregação de necessidades.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List

from solarstock.adapters.parsers import parse_quantity
from solarstock.config import DB_PATH
from solarstock.domain.models import Direction, MaterialLine, ProjectSpec, StockEvent
from solarstock.infra.logger import log_database_operation, log_system_event, log_transaction
from solarstock.infra.repositories import EventRepo, SpecRepo
from solarstock.usecases.manage_bom import run_generate_bom
from solarstock.usecases.register_events import new_event_id

BOM_STOCK_OUT_SOURCE = "BOM Stock Out"


def stock_out_events(spec: ProjectSpec, lines: List[MaterialLine], when: datetime) -> List[StockEvent]:
    """Eventos OUT correspondentes às linhas do projeto."""
    out: List[StockEvent] = []
    for line in lines:
        key = line.stock_key()
        qty = parse_quantity(line.quantity)
        if key is None or qty is None or qty <= 0:
            continue
        out.append(
            StockEvent(
                id=new_event_id(),
                timestamp=when,
                item=key.item,
                type=key.type,
                brand=key.brand,
                quantity=qty,
                direction=Direction.OUT,
                rate=0.0,
                source=BOM_STOCK_OUT_SOURCE,
                supplier=f"Customer: {spec.customer}",
            )
        )
    return out


def run_bom_stock_out(spec_id: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Dá baixa no estoque de todos os materiais do projeto."""
    log_system_event("bom_stock_out_start", {"spec_id": spec_id})
    try:
        lines = run_generate_bom(spec_id, db_path=db_path)
        spec = SpecRepo(db_path).get(spec_id)
        events = stock_out_events(spec, lines, datetime.now())
        EventRepo(db_path).insert_many(events)
    except Exception as e:
        log_transaction("bom_stock_out", {"spec_id": spec_id}, error=str(e))
        raise
    log_database_operation("stock_event", "INSERT_MANY", len(events), spec_id=spec_id)
    result = {
        "projeto": spec_id,
        "cliente": spec.customer,
        "eventos": len(events),
        "ignoradas": len(lines) - len(events),
    }
    log_transaction("bom_stock_out", {"spec_id": spec_id}, result=result)
    return result
