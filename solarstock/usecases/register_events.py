# solarstock/usecases/register_events.py
"""
UC: Registrar movimentações de estoque (entrada/saída, única e em lote).

O livro é append-only: um evento nunca é alterado, só removido por id, e a
remoção não gera lançamento de estorno.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from solarstock.adapters.parsers import parse_float
from solarstock.adapters.sheet_loader import load_events_from_sheet
from solarstock.config import DB_PATH, STANDARD_BRAND
from solarstock.domain.models import Direction, StockEvent
from solarstock.infra.logger import (
    log_database_operation, log_file_operation, log_stock_event,
    log_system_event, log_transaction
)
from solarstock.infra.migrations import apply_migrations
from solarstock.infra.repositories import EventRepo


def new_event_id() -> str:
    return uuid.uuid4().hex


def build_event(
    item: str,
    type_: str,
    quantity: Any,
    direction: Any,
    brand: Optional[str] = None,
    rate: Any = None,
    source: Optional[str] = None,
    supplier: Optional[str] = None,
    timestamp: Optional[datetime] = None,
    event_id: Optional[str] = None,
) -> StockEvent:
    """Monta um evento validado.

    Raises:
        ValueError: item/tipo vazios, direção inválida ou quantidade não
            numérica/não positiva.
    """
    qty = parse_float(quantity)
    if qty is None or qty <= 0:
        raise ValueError(f"quantidade inválida: {quantity!r}")
    return StockEvent(
        id=event_id or new_event_id(),
        timestamp=timestamp or datetime.now(),
        item=item,
        type=type_,
        quantity=qty,
        direction=Direction.parse(direction),
        brand=brand or STANDARD_BRAND,
        rate=parse_float(rate, 0.0),
        source=source or "",
        supplier=supplier or "",
    )


def run_register_event(db_path: str = DB_PATH, **fields: Any) -> StockEvent:
    """Registra uma única movimentação (campos aceitos: ver ``build_event``)."""
    log_system_event("register_event_start", {"item": fields.get("item")})
    try:
        apply_migrations(db_path)
        ev = build_event(**fields)
        EventRepo(db_path).insert(ev)
    except Exception as e:
        log_transaction("register_event", {k: str(v) for k, v in fields.items()}, error=str(e))
        raise
    log_stock_event("insert", ev.key.item, ev.key.type, ev.quantity, ev.direction.value, brand=ev.key.brand, id=ev.id)
    log_database_operation("stock_event", "INSERT", 1, id=ev.id)
    log_transaction("register_event", {"id": ev.id}, result="success")
    return ev


def run_stock_in(item: str, type_: str, quantity: Any, db_path: str = DB_PATH, **extra: Any) -> StockEvent:
    return run_register_event(db_path, item=item, type_=type_, quantity=quantity, direction=Direction.IN, **extra)


def run_stock_out(item: str, type_: str, quantity: Any, db_path: str = DB_PATH, **extra: Any) -> StockEvent:
    return run_register_event(db_path, item=item, type_=type_, quantity=quantity, direction=Direction.OUT, **extra)


def run_delete_event(event_id: str, db_path: str = DB_PATH) -> None:
    """Remove definitivamente um evento do livro."""
    apply_migrations(db_path)
    if not EventRepo(db_path).delete(event_id):
        raise KeyError(f"evento não encontrado: {event_id}")
    log_stock_event("delete", "", "", None, id=event_id)
    log_database_operation("stock_event", "DELETE", 1, id=event_id)


def run_list_events(db_path: str = DB_PATH) -> List[StockEvent]:
    apply_migrations(db_path)
    return EventRepo(db_path).get_all()


def run_events_from_sheet(path: str, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Lê uma planilha de movimentações e grava as linhas válidas.

    Linhas inválidas não interrompem a importação: são devolvidas em
    ``erros`` com o número da linha (1 = primeira linha de dados).
    """
    log_system_event("events_sheet_start", {"file_path": path})
    log_file_operation("import", path)
    try:
        apply_migrations(db_path)
        rows = load_events_from_sheet(path)
        events: List[StockEvent] = []
        erros: List[Dict[str, Any]] = []
        for i, row in enumerate(rows, start=1):
            try:
                ts = datetime.fromisoformat(row["date"]) if row.get("date") else None
                events.append(
                    build_event(
                        item=row.get("item"),
                        type_=row.get("type"),
                        quantity=row.get("quantity"),
                        direction=row.get("kind"),
                        brand=row.get("brand"),
                        rate=row.get("rate"),
                        source=row.get("source"),
                        supplier=row.get("supplier"),
                        timestamp=ts,
                    )
                )
            except ValueError as e:
                erros.append({"linha": i, "mensagem": str(e)})
        EventRepo(db_path).insert_many(events)
        log_database_operation("stock_event", "INSERT_MANY", len(events), file_path=path)
    except Exception as e:
        log_transaction("events_sheet", {"file": path}, error=str(e))
        log_system_event("events_sheet_error", {"file_path": path, "error": str(e)}, level="error")
        raise

    result = {
        "tipo": "Movimentações",
        "arquivo": path,
        "total": len(rows),
        "sucessos": len(events),
        "erros": erros,
    }
    log_file_operation("import", path, rows_processed=len(rows), inserted=len(events))
    log_transaction("events_sheet", {"file": path, "rows_count": len(rows)}, result={"sucessos": len(events)})
    return result
