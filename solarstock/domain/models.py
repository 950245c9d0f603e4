# solarstock/domain/models.py
"""
Modelos (dataclasses) do domínio.

Observação importante:
- ``StockKey`` é a identidade canônica de um item estocado. A normalização
  (trim e marca padrão) acontece uma única vez, na construção.
- Quantidades em branco (``None``) significam "não se aplica" e são
  diferentes de zero. Quem consome as linhas decide como tratá-las.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union

from solarstock.config import CUSTOM_TABLE_OPTION, STANDARD_BRAND


# Valor de quantidade: número, texto livre (linhas informadas pelo usuário)
# ou None (sentinela "em branco").
Quantity = Union[int, float, str, None]


class Phase(str, Enum):
    SINGLE = "SINGLE"
    TRIPLE = "TRIPLE"

    @classmethod
    def parse(cls, value) -> "Phase":
        if isinstance(value, Phase):
            return value
        s = str(value or "").strip().upper()
        try:
            return cls(s)
        except ValueError:
            raise ValueError(f"fase inválida: {value!r} (use SINGLE ou TRIPLE)") from None


class Direction(str, Enum):
    IN = "IN"
    OUT = "OUT"

    @classmethod
    def parse(cls, value) -> "Direction":
        if isinstance(value, Direction):
            return value
        s = str(value or "").strip().upper()
        try:
            return cls(s)
        except ValueError:
            raise ValueError(f"direção inválida: {value!r} (use IN ou OUT)") from None


class ShortageStatus(str, Enum):
    MISSING = "missing"
    INSUFFICIENT = "insufficient"
    CRITICAL = "critical"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _STATUS_RANK[self]


_STATUS_RANK = {
    ShortageStatus.MISSING: 0,
    ShortageStatus.INSUFFICIENT: 1,
    ShortageStatus.CRITICAL: 2,
    ShortageStatus.LOW: 3,
}


def _clean(value: Optional[str]) -> str:
    return str(value).strip() if value is not None else ""


@dataclass(frozen=True)
class StockKey:
    """Identidade (item, tipo, marca) de um item de estoque."""
    item: str
    type: str
    brand: str = STANDARD_BRAND

    def __post_init__(self) -> None:
        item = _clean(self.item)
        type_ = _clean(self.type)
        if not item:
            raise ValueError("StockKey exige item")
        if not type_:
            raise ValueError("StockKey exige tipo")
        object.__setattr__(self, "item", item)
        object.__setattr__(self, "type", type_)
        object.__setattr__(self, "brand", _clean(self.brand) or STANDARD_BRAND)

    def sort_tuple(self) -> Tuple[str, str, str]:
        return (self.item, self.type, self.brand)

    def __str__(self) -> str:
        return f"{self.item} / {self.type} / {self.brand}"


@dataclass
class ProjectSpec:
    """Especificação de um projeto (registro de BOM)."""
    id: str
    customer: str
    capacity_kw: Optional[float] = None
    panel_wattage: Optional[float] = None
    phase: Phase = Phase.SINGLE
    ac_wire: str = ""
    dc_wire: str = ""
    la_wire: str = ""
    earthing_wire: str = ""
    legs: int = 0
    table_option: str = "Standard"
    front_leg: str = ""
    back_leg: str = ""
    roof_design: str = ""
    panel_name: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_custom(self) -> bool:
        return _clean(self.table_option).lower() == CUSTOM_TABLE_OPTION.lower()


@dataclass(frozen=True)
class MaterialLine:
    """Linha de material de uma BOM."""
    serial: int
    item: str
    description: str = ""
    make: str = ""
    quantity: Quantity = None
    unit: str = ""

    def stock_key(self) -> Optional[StockKey]:
        """Chave de estoque da linha, ou None quando o tipo está vazio."""
        if not _clean(self.item) or not _clean(self.description):
            return None
        return StockKey(self.item, self.description, self.make)


@dataclass(frozen=True)
class StockEvent:
    """Movimentação do livro de estoque (imutável, só removida por id)."""
    id: str
    timestamp: datetime
    item: str
    type: str
    quantity: float
    direction: Direction
    brand: str = STANDARD_BRAND
    rate: float = 0.0
    source: str = ""
    supplier: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "direction", Direction.parse(self.direction))
        # valida item/tipo já na construção
        StockKey(self.item, self.type, self.brand)

    @property
    def key(self) -> StockKey:
        return StockKey(self.item, self.type, self.brand)

    @property
    def signed_quantity(self) -> float:
        """Contribuição do evento ao saldo: +qtd para IN, -qtd para OUT."""
        qty = abs(float(self.quantity))
        return qty if self.direction is Direction.IN else -qty


@dataclass
class RequiredAggregate:
    """Necessidade total de uma chave e os clientes que a geraram."""
    key: StockKey
    total: float = 0.0
    consumers: set = field(default_factory=set)

    def add(self, qty: float, consumer: Optional[str]) -> None:
        self.total += qty
        if consumer:
            self.consumers.add(consumer)


@dataclass(frozen=True)
class ShortageRecord:
    """Alerta de falta/estoque baixo para uma chave."""
    key: StockKey
    status: ShortageStatus
    current: float
    shortfall: Optional[float] = None
    required: Optional[float] = None
    consumers: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "item": self.key.item,
            "type": self.key.type,
            "brand": self.key.brand,
            "status": self.status.value,
            "current": self.current,
            "required": self.required,
            "shortfall": self.shortfall,
            "consumers": list(self.consumers),
        }
