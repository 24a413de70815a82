"""Market context models: regime, forecast and multi-timeframe results."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional

from .signals import SignalType


class Direction(str, Enum):
    """Price direction."""
    UP = "UP"
    DOWN = "DOWN"
    NEUTRAL = "NEUTRAL"


class RegimeType(str, Enum):
    """Market regime classification."""
    TRENDING = "TRENDING"
    RANGING = "RANGING"
    VOLATILE = "VOLATILE"
    ACCUMULATION = "ACCUMULATION"
    DISTRIBUTION = "DISTRIBUTION"
    UNDEFINED = "UNDEFINED"


class MarketPhase(str, Enum):
    """Position within a directional move."""
    EARLY = "EARLY"
    MIDDLE = "MIDDLE"
    LATE = "LATE"


@dataclass(frozen=True)
class MarketRegime:
    """Current market state derived from the latest window."""
    regime: RegimeType
    strength: float                      # 0-100
    direction: Direction
    volatility: float                    # 0-100
    phase: Optional[MarketPhase] = None

    @classmethod
    def undefined(cls) -> "MarketRegime":
        return cls(regime=RegimeType.UNDEFINED, strength=0.0, direction=Direction.NEUTRAL, volatility=0.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "regime": self.regime.value,
            "strength": self.strength,
            "direction": self.direction.value,
            "volatility": self.volatility,
            "phase": self.phase.value if self.phase else None,
        }


@dataclass(frozen=True)
class ForecastResult:
    """Single-pass momentum estimate."""
    direction: Direction
    confidence: float
    predicted_change: float              # percent


@dataclass(frozen=True)
class MomentumForecast:
    """Combined short and medium term forecast."""
    prediction: SignalType
    confidence: float
    predicted_change_percent: float
    short_term: Direction
    medium_term: Direction
    explanation: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "prediction": self.prediction.value,
            "confidence": self.confidence,
            "predicted_change_percent": self.predicted_change_percent,
            "short_term": self.short_term.value,
            "medium_term": self.medium_term.value,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class TimeframeAnalysis:
    """Vote across synthetic coarser timeframes."""
    dominant_direction: Direction
    alignment_score: float
    timeframe_directions: Mapping[str, Direction] = field(default_factory=dict)
    weighted_confidence: float = 0.0
    weighted_predicted_change: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "timeframe_directions", MappingProxyType(dict(self.timeframe_directions)))

    def to_dict(self) -> dict[str, Any]:
        return {
            "dominant_direction": self.dominant_direction.value,
            "alignment_score": self.alignment_score,
            "timeframe_directions": {k: v.value for k, v in self.timeframe_directions.items()},
            "weighted_confidence": self.weighted_confidence,
            "weighted_predicted_change": self.weighted_predicted_change,
        }
