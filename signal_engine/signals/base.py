"""
Shared container for per-category signal generators.
"""

from dataclasses import dataclass, field
from typing import Optional

from ..models import IndicatorSignal, SignalType, TradingSignal


@dataclass
class SignalGroup:
    """
    Ordered explanations plus the named votes of one or more generators.

    A later vote under an existing name replaces the earlier one while its
    explanation is still appended.
    """
    signals: list[TradingSignal] = field(default_factory=list)
    indicators: dict[str, IndicatorSignal] = field(default_factory=dict)

    def add(
        self,
        name: str,
        signal: SignalType,
        weight: float,
        confidence: float,
        message: str,
        strength: Optional[int] = None,
        label: Optional[str] = None,
    ) -> None:
        """
        Record a vote and its explanation.

        Args:
            name: Indicator key used for weighting
            signal: Verdict
            weight: Positive vote weight
            confidence: Vote confidence 0-100
            message: Human-readable explanation
            strength: Display strength, defaults to the rounded weight
            label: Display name when it differs from the key
        """
        self.indicators[name] = IndicatorSignal(signal=signal, weight=weight, confidence=confidence)
        self.signals.append(TradingSignal(
            indicator=label or name,
            signal=signal,
            message=message,
            strength=strength if strength is not None else max(1, round(weight)),
        ))

    def merge(self, other: "SignalGroup") -> "SignalGroup":
        """Append another group's explanations and overlay its votes."""
        self.signals.extend(other.signals)
        self.indicators.update(other.indicators)
        return self
