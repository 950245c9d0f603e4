"""
Agregação das necessidades de material de vários projetos.

Para cada projeto as linhas vêm do motor de regras ou, quando existirem,
das linhas informadas diretamente (obrigatório para projetos "Custom").
As quantidades são somadas por ``StockKey`` e os clientes que geraram a
necessidade são acumulados sem repetição.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Mapping, Optional, Sequence

from solarstock.adapters.parsers import parse_quantity
from solarstock.domain.bom_rules import generate_material_lines
from solarstock.domain.models import MaterialLine, ProjectSpec, RequiredAggregate, StockKey

logger = logging.getLogger(__name__)

LineSource = Mapping[str, Sequence[MaterialLine]]


def lines_for_spec(spec: ProjectSpec, line_source: Optional[LineSource] = None) -> Sequence[MaterialLine]:
    """Linhas de material efetivas de um projeto.

    Linhas informadas para o projeto têm prioridade sobre as geradas.
    Projetos "Custom" sem linhas informadas não contribuem com nada.
    """
    supplied = (line_source or {}).get(spec.id)
    if supplied:
        return supplied
    if spec.is_custom:
        logger.warning("Projeto Custom sem linhas informadas: %s (%s)", spec.id, spec.customer)
        return []
    return generate_material_lines(spec)


def aggregate_requirements(
    specs: Iterable[ProjectSpec],
    line_source: Optional[LineSource] = None,
) -> Dict[StockKey, RequiredAggregate]:
    """Soma as necessidades por ``StockKey`` com atribuição de clientes."""
    out: Dict[StockKey, RequiredAggregate] = {}
    for spec in specs:
        for line in lines_for_spec(spec, line_source):
            key = line.stock_key()
            if key is None:
                # sem tipo não há como casar com o estoque
                continue
            qty = parse_quantity(line.quantity)
            # em branco, texto ou não positiva: cliente registrado, nada somado
            if qty is None or qty <= 0:
                qty = 0.0
            agg = out.get(key)
            if agg is None:
                agg = out[key] = RequiredAggregate(key)
            agg.add(qty, spec.customer)
    return out


def merge_requirements(*parts: Mapping[StockKey, RequiredAggregate]) -> Dict[StockKey, RequiredAggregate]:
    """Junta agregados parciais somando totais e unindo clientes."""
    out: Dict[StockKey, RequiredAggregate] = {}
    for part in parts:
        for key, agg in part.items():
            acc = out.get(key)
            if acc is None:
                acc = out[key] = RequiredAggregate(key)
            acc.total += agg.total
            acc.consumers |= agg.consumers
    return out
