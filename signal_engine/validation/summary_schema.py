"""Shape validation for serialized signal summaries."""

from typing import Any

import structlog

logger = structlog.get_logger(__name__)

SIGNAL_VALUES = ["BUY", "SELL", "HOLD", "NEUTRAL"]
DIRECTION_VALUES = ["UP", "DOWN", "NEUTRAL"]
REGIME_VALUES = ["TRENDING", "RANGING", "VOLATILE", "ACCUMULATION", "DISTRIBUTION", "UNDEFINED"]
PHASE_VALUES = ["EARLY", "MIDDLE", "LATE", None]


# Summary JSON schema, the shape produced by SignalSummary.to_dict()
SUMMARY_SCHEMA = {
    "type": "object",
    "required": ["overall_signal", "confidence", "indicators", "signals", "price_targets"],
    "properties": {
        "overall_signal": {
            "type": "string",
            "enum": SIGNAL_VALUES,
            "description": "Consensus verdict"
        },
        "confidence": {
            "type": "number",
            "minimum": 0,
            "maximum": 100,
            "description": "Heuristic confidence score 0-100"
        },
        "indicators": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "required": ["signal", "weight", "confidence"],
                "properties": {
                    "signal": {"type": "string", "enum": SIGNAL_VALUES},
                    "weight": {"type": "number", "exclusiveMinimum": 0},
                    "confidence": {"type": "number", "minimum": 0, "maximum": 100}
                }
            },
            "description": "Per-indicator votes"
        },
        "signals": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["indicator", "signal", "message", "strength"]
            },
            "description": "Human-readable explanations"
        },
        "price_targets": {
            "type": ["object", "null"],
            "required": ["entry_price", "stop_loss", "target1", "target2", "target3", "risk_reward_ratio"],
            "description": "ATR-based targets for BUY/SELL verdicts"
        },
        "regime": {
            "type": ["object", "null"],
            "properties": {
                "regime": {"type": "string", "enum": REGIME_VALUES},
                "direction": {"type": "string", "enum": DIRECTION_VALUES},
                "phase": {"type": ["string", "null"], "enum": PHASE_VALUES}
            }
        },
        "forecast": {"type": ["object", "null"]},
        "timeframes": {"type": ["object", "null"]}
    },
    "additionalProperties": True
}

TARGET_FIELDS = SUMMARY_SCHEMA["properties"]["price_targets"]["required"]


class SummaryValidationError(Exception):
    """Summary validation error."""
    pass


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class SummaryValidator:
    """Validates serialized summaries against SUMMARY_SCHEMA."""

    def __init__(self):
        self.logger = logger
        self.schema = SUMMARY_SCHEMA

    def validate_summary(self, summary: dict[str, Any]) -> bool:
        """
        Validate a summary dictionary.

        Args:
            summary: Output of SignalSummary.to_dict()

        Returns:
            True if valid

        Raises:
            SummaryValidationError: If validation fails
        """
        try:
            self._validate_required_fields(summary)
            self._validate_verdict(summary)
            self._validate_indicators(summary)
            self._validate_signals(summary)
            self._validate_price_targets(summary)
            self._validate_regime(summary)
            return True

        except ValueError as e:
            error_msg = f"Summary validation failed: {str(e)}"
            self.logger.error("summary_validation_failed", error=str(e))
            raise SummaryValidationError(error_msg) from e

    def _validate_required_fields(self, summary: dict[str, Any]) -> None:
        """Validate required fields are present."""
        if not isinstance(summary, dict):
            raise ValueError("summary must be an object")
        missing_fields = [field for field in self.schema["required"] if field not in summary]
        if missing_fields:
            raise ValueError(f"Missing required fields: {missing_fields}")

    def _validate_verdict(self, summary: dict[str, Any]) -> None:
        if summary["overall_signal"] not in SIGNAL_VALUES:
            raise ValueError(f"Invalid overall_signal: {summary['overall_signal']}")

        confidence = summary["confidence"]
        if not _is_number(confidence) or not (0 <= confidence <= 100):
            raise ValueError(f"confidence must be a number between 0-100, got: {confidence}")

    def _validate_indicators(self, summary: dict[str, Any]) -> None:
        indicators = summary["indicators"]
        if not isinstance(indicators, dict):
            raise ValueError("indicators must be an object")

        for name, vote in indicators.items():
            if not isinstance(vote, dict):
                raise ValueError(f"indicator {name} must be an object")
            if vote.get("signal") not in SIGNAL_VALUES:
                raise ValueError(f"indicator {name} has invalid signal: {vote.get('signal')}")
            if not _is_number(vote.get("weight")) or vote["weight"] <= 0:
                raise ValueError(f"indicator {name} weight must be positive, got: {vote.get('weight')}")
            if not _is_number(vote.get("confidence")) or not (0 <= vote["confidence"] <= 100):
                raise ValueError(f"indicator {name} confidence must be between 0-100, got: {vote.get('confidence')}")

    def _validate_signals(self, summary: dict[str, Any]) -> None:
        signals = summary["signals"]
        if not isinstance(signals, list):
            raise ValueError("signals must be an array")

        required = self.schema["properties"]["signals"]["items"]["required"]
        for position, entry in enumerate(signals):
            if not isinstance(entry, dict):
                raise ValueError(f"signals[{position}] must be an object")
            missing = [field for field in required if field not in entry]
            if missing:
                raise ValueError(f"signals[{position}] missing fields: {missing}")
            if entry["signal"] not in SIGNAL_VALUES:
                raise ValueError(f"signals[{position}] has invalid signal: {entry['signal']}")

    def _validate_price_targets(self, summary: dict[str, Any]) -> None:
        """Targets are present exactly for BUY/SELL and ordered away from the stop."""
        targets = summary["price_targets"]
        verdict = summary["overall_signal"]

        if targets is None:
            return
        if verdict not in ("BUY", "SELL"):
            raise ValueError(f"{verdict} summaries must not carry price targets")
        if not isinstance(targets, dict):
            raise ValueError("price_targets must be an object")

        missing = [field for field in TARGET_FIELDS if field not in targets]
        if missing:
            raise ValueError(f"price_targets missing fields: {missing}")
        if not all(_is_number(targets[field]) for field in TARGET_FIELDS):
            raise ValueError("price_targets values must be numbers")

        ladder = [targets["stop_loss"], targets["entry_price"], targets["target1"], targets["target2"], targets["target3"]]
        if verdict == "SELL":
            ladder.reverse()
        if any(lower >= upper for lower, upper in zip(ladder, ladder[1:])):
            raise ValueError(f"price_targets out of order for {verdict}: {ladder}")

    def _validate_regime(self, summary: dict[str, Any]) -> None:
        regime = summary.get("regime")
        if regime is None:
            return
        if not isinstance(regime, dict):
            raise ValueError("regime must be an object")
        if regime.get("regime") not in REGIME_VALUES:
            raise ValueError(f"Invalid regime: {regime.get('regime')}")
        if regime.get("direction") not in DIRECTION_VALUES:
            raise ValueError(f"Invalid regime direction: {regime.get('direction')}")
        if regime.get("phase") not in PHASE_VALUES:
            raise ValueError(f"Invalid regime phase: {regime.get('phase')}")

    def validate_summaries(self, summaries: list[dict[str, Any]]) -> list[bool]:
        """
        Validate multiple summaries.

        Returns:
            List of boolean validation results
        """
        results = []
        for summary in summaries:
            try:
                results.append(self.validate_summary(summary))
            except SummaryValidationError:
                results.append(False)
        return results

    def get_schema(self) -> dict[str, Any]:
        """Get the summary schema."""
        return self.schema.copy()


# Global validator instance
validator = SummaryValidator()


def validate_summary(summary: dict[str, Any]) -> bool:
    """Convenience function to validate a summary."""
    return validator.validate_summary(summary)
