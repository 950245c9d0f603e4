"""
Políticas de classificação de faltas de estoque.

Este módulo contém a tabela de decisão que cruza as necessidades agregadas
dos projetos com o saldo do livro de estoque e os limites de alerta. É a
única implementação dessa regra: painéis, relatórios e a CLI chamam
``classify`` em vez de repetir a lógica.
"""

from __future__ import annotations

from typing import Dict, List, Mapping, Optional

from solarstock.domain.models import RequiredAggregate, ShortageRecord, ShortageStatus, StockKey
from solarstock.domain.thresholds import ThresholdConfig


def status_por_requisito(current: float, required: float) -> Optional[ShortageStatus]:
    """Classifica uma chave com necessidade positiva de projeto.

    Regras:
        - ``current <= 0`` → ``missing``
        - ``current < required`` → ``insufficient``
        - caso contrário → ``None`` (sem alerta)
    """
    if current <= 0:
        return ShortageStatus.MISSING
    if current < required:
        return ShortageStatus.INSUFFICIENT
    return None


def status_por_limite(current: float, critical: float, low: float) -> Optional[ShortageStatus]:
    """Classifica uma chave presente só no livro de estoque.

    Regras:
        - ``current <= 0`` → ``missing``
        - ``current <= critical`` → ``critical``
        - ``current <= low`` → ``low``
        - caso contrário → ``None`` (sem alerta)
    """
    if current <= 0:
        return ShortageStatus.MISSING
    if current <= critical:
        return ShortageStatus.CRITICAL
    if current <= low:
        return ShortageStatus.LOW
    return None


def _sort_key(rec: ShortageRecord):
    return (rec.status.rank, -(rec.shortfall or 0.0), rec.current, rec.key.sort_tuple())


def classify(
    required: Mapping[StockKey, RequiredAggregate],
    balances: Mapping[StockKey, float],
    thresholds: ThresholdConfig,
) -> List[ShortageRecord]:
    """Gera a lista ordenada de alertas de estoque.

    Cada chave gera no máximo um registro. Chaves com necessidade positiva
    são avaliadas só pela necessidade, mesmo que também se enquadrem nos
    limites crítico/baixo. Saldo ausente vale zero.

    Ordenação: status (missing, insufficient, critical, low), depois falta
    decrescente e por fim saldo crescente.
    """
    out: Dict[StockKey, Optional[ShortageRecord]] = {}

    for key, agg in required.items():
        if agg.total <= 0:
            continue
        current = float(balances.get(key, 0.0))
        status = status_por_requisito(current, agg.total)
        if status is None:
            out[key] = None  # atendido; não reavaliar pelos limites
            continue
        out[key] = ShortageRecord(
            key=key,
            status=status,
            current=current,
            shortfall=agg.total - current if status is ShortageStatus.INSUFFICIENT else agg.total,
            required=agg.total,
            consumers=tuple(sorted(agg.consumers)),
        )

    for key, current in balances.items():
        if key in out:
            continue
        pair = thresholds.for_item(key.item)
        status = status_por_limite(float(current), pair.critical, pair.low)
        if status is not None:
            out[key] = ShortageRecord(key=key, status=status, current=float(current))

    return sorted((r for r in out.values() if r is not None), key=_sort_key)


def summarize(records: List[ShortageRecord]) -> Dict[str, int]:
    """Contagem de alertas por status (cartões do painel)."""
    counts = {s.value: 0 for s in ShortageStatus}
    for r in records:
        counts[r.status.value] += 1
    return counts
