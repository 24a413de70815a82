"""
Signal models: per-indicator votes, targets and the consensus summary.

SignalSummary is the only artifact consumed outside the engine. It is
immutable once built and serializes to plain dicts or JSON bytes.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Optional

import orjson

if TYPE_CHECKING:
    from .market import MarketRegime, MomentumForecast, TimeframeAnalysis


class SignalType(str, Enum):
    """Discrete trading verdict."""
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"
    NEUTRAL = "NEUTRAL"


@dataclass(frozen=True)
class IndicatorSignal:
    """One weighted vote from an indicator rule."""
    signal: SignalType
    weight: float
    confidence: float

    def __post_init__(self):
        if self.weight <= 0:
            raise ValueError(f"Indicator weight must be positive, got {self.weight}")
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"Indicator confidence must be within [0, 100], got {self.confidence}")

    def scaled(self, factor: float) -> "IndicatorSignal":
        """Copy with the weight multiplied by `factor`."""
        return IndicatorSignal(signal=self.signal, weight=self.weight * factor, confidence=self.confidence)

    def to_dict(self) -> dict[str, Any]:
        return {"signal": self.signal.value, "weight": self.weight, "confidence": self.confidence}


@dataclass(frozen=True)
class TradingSignal:
    """Human-readable explanation of a vote."""
    indicator: str
    signal: SignalType
    message: str
    strength: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "indicator": self.indicator,
            "signal": self.signal.value,
            "message": self.message,
            "strength": self.strength,
        }


@dataclass(frozen=True)
class SignalWeights:
    """Summed indicator weights per verdict."""
    buy: float = 0.0
    sell: float = 0.0
    hold: float = 0.0
    neutral: float = 0.0

    @property
    def total(self) -> float:
        return self.buy + self.sell + self.hold + self.neutral

    def share(self, weight: float) -> float:
        """Fraction of the total weight, 0 for an empty vote."""
        total = self.total
        return weight / total if total > 0 else 0.0

    def to_dict(self) -> dict[str, float]:
        return {
            "buy": self.buy,
            "sell": self.sell,
            "hold": self.hold,
            "neutral": self.neutral,
            "total": self.total,
        }


@dataclass(frozen=True)
class PriceTargets:
    """ATR-based entry, stop and staged targets."""
    entry_price: float
    stop_loss: float
    target1: float
    target2: float
    target3: float
    risk_reward_ratio: float

    def to_dict(self) -> dict[str, float]:
        return {
            "entry_price": self.entry_price,
            "stop_loss": self.stop_loss,
            "target1": self.target1,
            "target2": self.target2,
            "target3": self.target3,
            "risk_reward_ratio": self.risk_reward_ratio,
        }


@dataclass(frozen=True)
class SignalSummary:
    """Consensus verdict of one evaluation."""
    overall_signal: SignalType
    confidence: float
    indicators: Mapping[str, IndicatorSignal] = field(default_factory=dict)
    signals: tuple[TradingSignal, ...] = ()
    price_targets: Optional[PriceTargets] = None
    regime: Optional["MarketRegime"] = None
    forecast: Optional["MomentumForecast"] = None
    timeframes: Optional["TimeframeAnalysis"] = None

    def __post_init__(self):
        object.__setattr__(self, "indicators", MappingProxyType(dict(self.indicators)))
        object.__setattr__(self, "signals", tuple(self.signals))

    @classmethod
    def neutral(cls) -> "SignalSummary":
        """Zero-confidence summary used when there is not enough data."""
        return cls(overall_signal=SignalType.NEUTRAL, confidence=0.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall_signal": self.overall_signal.value,
            "confidence": self.confidence,
            "indicators": {name: sig.to_dict() for name, sig in self.indicators.items()},
            "signals": [s.to_dict() for s in self.signals],
            "price_targets": self.price_targets.to_dict() if self.price_targets else None,
            "regime": self.regime.to_dict() if self.regime else None,
            "forecast": self.forecast.to_dict() if self.forecast else None,
            "timeframes": self.timeframes.to_dict() if self.timeframes else None,
        }

    def to_json(self) -> bytes:
        return orjson.dumps(self.to_dict())
