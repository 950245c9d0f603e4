"""
Limites de alerta de estoque (global e por item).

Um item com saldo positivo e sem necessidade de projeto é classificado
como ``critical`` quando o saldo é menor ou igual ao limite crítico e como
``low`` quando é menor ou igual ao limite baixo. O limite crítico precisa
ser estritamente menor que o baixo.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from solarstock.config import DEFAULTS


class ThresholdConfigError(ValueError):
    """Configuração de limites inválida (critical >= low)."""


@dataclass(frozen=True)
class ThresholdPair:
    critical: float
    low: float

    def validate(self, label: str = "global") -> None:
        if not self.critical < self.low:
            raise ThresholdConfigError(
                f"limite crítico ({self.critical:g}) deve ser menor que o baixo ({self.low:g}) [{label}]"
            )


@dataclass(frozen=True)
class ThresholdConfig:
    critical: float = DEFAULTS.critical
    low: float = DEFAULTS.low
    overrides: Mapping[str, ThresholdPair] = field(default_factory=dict)

    @property
    def global_pair(self) -> ThresholdPair:
        return ThresholdPair(self.critical, self.low)

    def for_item(self, item: str) -> ThresholdPair:
        """Par de limites do item (override, se houver; senão o global)."""
        return self.overrides.get(str(item).strip(), self.global_pair)

    def validate(self) -> None:
        self.global_pair.validate()
        for item, pair in self.overrides.items():
            pair.validate(item)

    def with_override(self, item: str, critical: float, low: float) -> "ThresholdConfig":
        items = dict(self.overrides)
        items[str(item).strip()] = ThresholdPair(float(critical), float(low))
        return ThresholdConfig(self.critical, self.low, items)

    def without_override(self, item: str) -> "ThresholdConfig":
        items = {k: v for k, v in self.overrides.items() if k != str(item).strip()}
        return ThresholdConfig(self.critical, self.low, items)

    # --------- serialização (blob JSON) ---------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "critical": self.critical,
            "low": self.low,
            "items": {k: {"critical": v.critical, "low": v.low} for k, v in self.overrides.items()},
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, sort_keys=True)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ThresholdConfig":
        """Reconstrói a configuração; campos ausentes assumem os padrões."""
        critical = float(data.get("critical", DEFAULTS.critical))
        low = float(data.get("low", DEFAULTS.low))
        items = {
            str(name).strip(): ThresholdPair(float(v["critical"]), float(v["low"]))
            for name, v in (data.get("items") or {}).items()
        }
        return cls(critical, low, items)

    @classmethod
    def from_json(cls, raw: str) -> "ThresholdConfig":
        return cls.from_dict(json.loads(raw))
