# solarstock/usecases/check_stock.py
"""
Caso de uso: verificar estoque (necessidades dos projetos x livro de estoque).

Fluxo:
1) Confere que o banco existe (leitura nunca cria banco) e aplica migrações.
2) Lê um snapshot do banco: projetos, linhas informadas, eventos e limites.
3) Agrega as necessidades por (item, tipo, marca).
4) Calcula o saldo atual a partir do livro de estoque.
5) Classifica faltas e alertas (missing, insufficient, critical, low).

Observações:
- Falha ao ler o banco levanta ``StoreUnavailableError``; nunca rodamos a
  classificação contra um livro "vazio" por engano.
- Nada é cacheado: cada chamada recalcula tudo a partir do banco.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from solarstock.config import DB_PATH
from solarstock.domain.aggregator import aggregate_requirements
from solarstock.domain.ledger import compute_balance
from solarstock.domain.models import (
    MaterialLine,
    ProjectSpec,
    RequiredAggregate,
    ShortageRecord,
    ShortageStatus,
    StockEvent,
    StockKey,
)
from solarstock.domain.policies import classify
from solarstock.domain.thresholds import ThresholdConfig
from solarstock.infra.db import StoreUnavailableError, require_existing
from solarstock.infra.logger import log_system_event, system_logger
from solarstock.infra.migrations import apply_migrations
from solarstock.infra.repositories import EventRepo, MaterialLineRepo, SpecRepo, ThresholdRepo


@dataclass
class StockSnapshot:
    """Leitura consistente do banco usada por um cálculo."""
    specs: List[ProjectSpec] = field(default_factory=list)
    lines: Dict[str, List[MaterialLine]] = field(default_factory=dict)
    events: List[StockEvent] = field(default_factory=list)
    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)


def load_snapshot(db_path: str = DB_PATH) -> StockSnapshot:
    """Lê tudo que o cálculo precisa; levanta StoreUnavailableError se o banco falhar."""
    try:
        require_existing(db_path)
        apply_migrations(db_path)
        snap = StockSnapshot(
            specs=SpecRepo(db_path).get_all(),
            lines=MaterialLineRepo(db_path).map_by_spec(),
            events=EventRepo(db_path).get_all(),
            thresholds=ThresholdRepo(db_path).load(),
        )
    except StoreUnavailableError as e:
        log_system_event("snapshot_error", {"db_path": db_path, "error": str(e)}, level="error")
        raise
    log_system_event(
        "snapshot_loaded",
        {"specs": len(snap.specs), "events": len(snap.events), "custom_lines": len(snap.lines)},
    )
    return snap


def requirements_from_snapshot(snap: StockSnapshot) -> Dict[StockKey, RequiredAggregate]:
    return aggregate_requirements(snap.specs, snap.lines)


def shortages_from_snapshot(
    snap: StockSnapshot,
    thresholds: Optional[ThresholdConfig] = None,
) -> List[ShortageRecord]:
    """Roda agregação + saldo + classificação sobre um snapshot já lido."""
    required = requirements_from_snapshot(snap)
    balances = compute_balance(snap.events)
    records = classify(required, balances, thresholds or snap.thresholds)
    system_logger.debug(
        f"CHECK_STOCK: {len(required)} chaves requeridas, {len(balances)} chaves no livro, {len(records)} alertas"
    )
    return records


def filter_by_status(records: Sequence[ShortageRecord], statuses: Optional[Sequence[str]]) -> List[ShortageRecord]:
    if not statuses:
        return list(records)
    wanted = {ShortageStatus(s.strip().lower()) for s in statuses}
    return [r for r in records if r.status in wanted]


def run_check_stock(
    db_path: str = DB_PATH,
    statuses: Optional[Sequence[str]] = None,
) -> List[ShortageRecord]:
    """Executa a verificação completa e devolve os alertas ordenados."""
    log_system_event("check_stock_start", {"db_path": db_path})
    snap = load_snapshot(db_path)
    records = filter_by_status(shortages_from_snapshot(snap), statuses)
    log_system_event("check_stock_success", {"alerts": len(records)})
    return records
