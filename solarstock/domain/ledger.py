"""
Saldo de estoque a partir do livro de movimentações.

O saldo de uma chave é a soma das entradas (IN) menos a soma das saídas
(OUT) de todos os eventos com o mesmo (item, tipo, marca). Uma remoção de
evento é modelada simplesmente pela ausência do evento na entrada.
"""

from __future__ import annotations

import math
from collections import defaultdict
from typing import Dict, Iterable, List

from solarstock.domain.models import StockEvent, StockKey


def compute_balance(events: Iterable[StockEvent]) -> Dict[StockKey, float]:
    """Calcula o saldo por ``StockKey``.

    O resultado não depende da ordem dos eventos (``math.fsum`` evita
    diferenças de arredondamento entre permutações). Eventos com o mesmo id
    não são deduplicados aqui; unicidade é responsabilidade do repositório.
    """
    parts: Dict[StockKey, List[float]] = defaultdict(list)
    for ev in events:
        parts[ev.key].append(ev.signed_quantity)
    return {key: math.fsum(vals) for key, vals in parts.items()}
