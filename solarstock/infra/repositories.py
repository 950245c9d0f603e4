# solarstock/infra/repositories.py
"""
Repositórios (DAO) para acesso e manipulação de dados no SQLite.

Classes:
- ParamsRepo
- ThresholdRepo
- SpecRepo
- MaterialLineRepo
- EventRepo

Os repositórios só leem e gravam; nenhum cálculo de estoque é feito aqui.
"""

from __future__ import annotations

import logging
import sqlite3
from collections import defaultdict
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from .db import connect
from solarstock.adapters.parsers import parse_float
from solarstock.config import STANDARD_BRAND
from solarstock.domain.models import MaterialLine, Phase, ProjectSpec, StockEvent
from solarstock.domain.thresholds import ThresholdConfig

logger = logging.getLogger(__name__)


# -------------------------
# Helpers
# -------------------------

def _rows_as_dicts(cur) -> List[Dict[str, Any]]:
    cols = [d[0] for d in cur.description]
    return [dict(zip(cols, row)) for row in cur.fetchall()]


def _to_iso(dt: datetime) -> str:
    return dt.isoformat(timespec="seconds")


def _from_iso(s: Optional[str]) -> datetime:
    if not s:
        return datetime.fromtimestamp(0)
    try:
        return datetime.fromisoformat(str(s))
    except ValueError:
        return datetime.fromtimestamp(0)


def _qty_to_db(q: Any) -> Optional[str]:
    if q is None:
        return None
    s = str(q).strip()
    return s or None


def _qty_from_db(v: Optional[str]) -> Any:
    if v is None:
        return None
    num = parse_float(v)
    return num if num is not None else v


# -------------------------
# Params
# -------------------------

class ParamsRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def set_many(self, items: Iterable[Tuple[str, str]]) -> None:
        with connect(self.db_path) as c:
            c.executemany(
                """
                INSERT INTO params (chave, valor)
                VALUES (?, ?)
                ON CONFLICT(chave) DO UPDATE SET valor=excluded.valor
                """,
                list(items),
            )

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with connect(self.db_path) as c:
            row = c.execute("SELECT valor FROM params WHERE chave = ?", (key,)).fetchone()
            return row[0] if row else default


# -------------------------
# Limites de alerta
# -------------------------

ThresholdListener = Callable[[ThresholdConfig], None]


class ThresholdRepo:
    """Blob JSON dos limites de alerta, guardado em ``params``.

    Os ``listeners`` recebem a nova configuração depois de cada gravação
    bem-sucedida; quem precisar reclassificar o estoque se registra aqui.
    """

    KEY = "stock_thresholds"

    def __init__(self, db_path: str, listeners: Sequence[ThresholdListener] = ()):
        self.params = ParamsRepo(db_path)
        self.listeners = list(listeners)

    def load(self) -> ThresholdConfig:
        raw = self.params.get(self.KEY)
        if raw is None:
            return ThresholdConfig()
        try:
            cfg = ThresholdConfig.from_json(raw)
            cfg.validate()
            return cfg
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning("Limites de alerta ilegíveis, usando padrões: %s", e)
            return ThresholdConfig()

    def save(self, config: ThresholdConfig) -> ThresholdConfig:
        config.validate()
        self.params.set_many([(self.KEY, config.to_json())])
        for listener in self.listeners:
            listener(config)
        return config


# -------------------------
# Projetos
# -------------------------

_SPEC_COLS = (
    "id, customer, capacity_kw, panel_wattage, table_option, phase, ac_wire, dc_wire, "
    "la_wire, earthing_wire, legs, created_at, front_leg, back_leg, roof_design, panel_name"
)


def _spec_from_row(r: Dict[str, Any]) -> ProjectSpec:
    return ProjectSpec(
        id=r["id"],
        customer=r["customer"],
        capacity_kw=r["capacity_kw"],
        panel_wattage=r["panel_wattage"],
        phase=Phase.parse(r["phase"]),
        ac_wire=r["ac_wire"] or "",
        dc_wire=r["dc_wire"] or "",
        la_wire=r["la_wire"] or "",
        earthing_wire=r["earthing_wire"] or "",
        legs=int(r["legs"] or 0),
        table_option=r["table_option"],
        front_leg=r["front_leg"] or "",
        back_leg=r["back_leg"] or "",
        roof_design=r["roof_design"] or "",
        panel_name=r["panel_name"],
        created_at=_from_iso(r["created_at"]),
    )


class SpecRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert(self, spec: ProjectSpec) -> None:
        with connect(self.db_path) as c:
            c.execute(
                f"""
                INSERT INTO project_spec ({_SPEC_COLS})
                VALUES (:id, :customer, :capacity_kw, :panel_wattage, :table_option, :phase,
                        :ac_wire, :dc_wire, :la_wire, :earthing_wire, :legs, :created_at,
                        :front_leg, :back_leg, :roof_design, :panel_name)
                """,
                {
                    "id": spec.id,
                    "customer": spec.customer,
                    "capacity_kw": spec.capacity_kw,
                    "panel_wattage": spec.panel_wattage,
                    "table_option": spec.table_option,
                    "phase": Phase.parse(spec.phase).value,
                    "ac_wire": spec.ac_wire,
                    "dc_wire": spec.dc_wire,
                    "la_wire": spec.la_wire,
                    "earthing_wire": spec.earthing_wire,
                    "legs": int(spec.legs or 0),
                    "created_at": _to_iso(spec.created_at),
                    "front_leg": spec.front_leg,
                    "back_leg": spec.back_leg,
                    "roof_design": spec.roof_design,
                    "panel_name": spec.panel_name,
                },
            )

    def get(self, spec_id: str) -> Optional[ProjectSpec]:
        with connect(self.db_path) as c:
            cur = c.execute(f"SELECT {_SPEC_COLS} FROM project_spec WHERE id = ?", (spec_id,))
            rows = _rows_as_dicts(cur)
        return _spec_from_row(rows[0]) if rows else None

    def get_all(self) -> List[ProjectSpec]:
        with connect(self.db_path) as c:
            cur = c.execute(f"SELECT {_SPEC_COLS} FROM project_spec ORDER BY created_at, id")
            rows = _rows_as_dicts(cur)
        return [_spec_from_row(r) for r in rows]

    def delete(self, spec_id: str) -> bool:
        with connect(self.db_path) as c:
            cur = c.execute("DELETE FROM project_spec WHERE id = ?", (spec_id,))
            return cur.rowcount > 0


# -------------------------
# Linhas de material informadas
# -------------------------

class MaterialLineRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def replace(self, spec_id: str, lines: Iterable[MaterialLine]) -> int:
        """Substitui todas as linhas do projeto; retorna quantas foram gravadas."""
        payload = [
            {
                "spec_id": spec_id,
                "serial": i,
                "item": ln.item,
                "description": ln.description,
                "make": ln.make,
                "quantity": _qty_to_db(ln.quantity),
                "unit": ln.unit,
            }
            for i, ln in enumerate(lines, start=1)
        ]
        with connect(self.db_path) as c:
            c.execute("DELETE FROM material_line WHERE spec_id = ?", (spec_id,))
            c.executemany(
                """
                INSERT INTO material_line (spec_id, serial, item, description, make, quantity, unit)
                VALUES (:spec_id, :serial, :item, :description, :make, :quantity, :unit)
                """,
                payload,
            )
        return len(payload)

    def clear(self, spec_id: str) -> None:
        with connect(self.db_path) as c:
            c.execute("DELETE FROM material_line WHERE spec_id = ?", (spec_id,))

    def get(self, spec_id: str) -> List[MaterialLine]:
        return self.map_by_spec([spec_id]).get(spec_id, [])

    def map_by_spec(self, spec_ids: Optional[Sequence[str]] = None) -> Dict[str, List[MaterialLine]]:
        sql = "SELECT spec_id, serial, item, description, make, quantity, unit FROM material_line"
        args: Tuple[Any, ...] = ()
        if spec_ids is not None:
            sql += f" WHERE spec_id IN ({','.join('?' for _ in spec_ids)})" if spec_ids else " WHERE 0"
            args = tuple(spec_ids)
        with connect(self.db_path) as c:
            rows = c.execute(sql + " ORDER BY spec_id, serial", args).fetchall()
        out: Dict[str, List[MaterialLine]] = defaultdict(list)
        for spec_id, serial, item, description, make, quantity, unit in rows:
            out[spec_id].append(
                MaterialLine(serial, item, description or "", make or "", _qty_from_db(quantity), unit or "")
            )
        return dict(out)


# -------------------------
# Livro de estoque
# -------------------------

def _event_from_row(r: Dict[str, Any]) -> StockEvent:
    return StockEvent(
        id=r["id"],
        timestamp=_from_iso(r["timestamp"]),
        item=r["item"],
        type=r["type"],
        quantity=float(r["quantity"]),
        direction=r["kind"],
        brand=r["brand"] or STANDARD_BRAND,
        rate=float(r["rate"] or 0.0),
        source=r["source"] or "",
        supplier=r["supplier"] or "",
    )


def _event_payload(ev: StockEvent) -> Dict[str, Any]:
    return {
        "id": ev.id,
        "timestamp": _to_iso(ev.timestamp),
        "item": ev.key.item,
        "type": ev.key.type,
        "brand": ev.key.brand,
        "quantity": abs(float(ev.quantity)),
        "kind": ev.direction.value,
        "rate": float(ev.rate or 0.0),
        "source": ev.source,
        "supplier": ev.supplier,
    }


_EVENT_INSERT = """
    INSERT INTO stock_event (id, timestamp, item, type, brand, quantity, kind, rate, source, supplier)
    VALUES (:id, :timestamp, :item, :type, :brand, :quantity, :kind, :rate, :source, :supplier)
"""


class EventRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def insert(self, event: StockEvent) -> None:
        self.insert_many([event])

    def insert_many(self, events: Iterable[StockEvent]) -> None:
        payload = [_event_payload(ev) for ev in events]
        if not payload:
            return
        try:
            with connect(self.db_path) as c:
                c.executemany(_EVENT_INSERT, payload)
        except sqlite3.IntegrityError as e:
            raise ValueError(f"evento duplicado ou inválido: {e}") from e

    def get_all(self) -> List[StockEvent]:
        with connect(self.db_path) as c:
            cur = c.execute(
                """SELECT id, timestamp, item, type, brand, quantity, kind, rate, source, supplier
                   FROM stock_event
                   ORDER BY timestamp, id"""
            )
            rows = _rows_as_dicts(cur)
        return [_event_from_row(r) for r in rows]

    def delete(self, event_id: str) -> bool:
        """Remove o evento definitivamente (sem lançamento de estorno)."""
        with connect(self.db_path) as c:
            cur = c.execute("DELETE FROM stock_event WHERE id = ?", (event_id,))
            return cur.rowcount > 0
