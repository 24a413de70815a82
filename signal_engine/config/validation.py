"""Configuration validation utilities."""

from dataclasses import asdict, dataclass
from typing import Any

from ..errors import ConfigurationError
from .defaults import EngineConfig


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_positive_ints(params: dict[str, Any], names: list[str]) -> list[ValidationError]:
    errors = []
    for name in names:
        if name in params:
            value = params[name]
            if not _is_int(value) or value <= 0:
                errors.append(ValidationError(
                    field=name,
                    message="Must be a positive integer",
                    value=value
                ))
    return errors


def _check_fractions(params: dict[str, Any], names: list[str]) -> list[ValidationError]:
    errors = []
    for name in names:
        if name in params:
            value = params[name]
            if not _is_number(value) or value <= 0 or value > 1:
                errors.append(ValidationError(
                    field=name,
                    message="Must be a positive number between 0 and 1",
                    value=value
                ))
    return errors


def _check_non_negative(params: dict[str, Any], names: list[str]) -> list[ValidationError]:
    errors = []
    for name in names:
        if name in params:
            value = params[name]
            if not _is_number(value) or value < 0:
                errors.append(ValidationError(
                    field=name,
                    message="Must be a non-negative number",
                    value=value
                ))
    return errors


def _check_ordered(params: dict[str, Any], fast: str, slow: str) -> list[ValidationError]:
    if fast in params and slow in params:
        a, b = params[fast], params[slow]
        if _is_number(a) and _is_number(b) and a >= b:
            return [ValidationError(
                field=fast,
                message=f"Must be smaller than {slow}",
                value=a
            )]
    return []


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_indicator_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate indicator periods and multipliers."""
        errors = _check_positive_ints(params, [
            "sma_fast", "sma_slow", "sma_long", "ema_fast", "ema_slow", "ema_regime", "sma_cross_lookback",
            "rsi_period", "macd_fast", "macd_slow", "macd_signal",
            "stochastic_k", "stochastic_d", "roc_period", "momentum_period",
            "bollinger_period", "atr_period", "adx_period",
            "vwap_period", "cmf_period", "volume_average_period",
            "sr_lookback", "sr_window", "sr_max_levels",
        ])
        errors.extend(_check_non_negative(params, ["bollinger_std"]))
        errors.extend(_check_fractions(params, ["sr_tolerance", "sr_merge_distance"]))

        # PSAR acceleration must grow toward a reachable ceiling
        step = params.get("psar_step")
        ceiling = params.get("psar_max")
        if step is not None and (not _is_number(step) or step <= 0):
            errors.append(ValidationError(field="psar_step", message="Must be a positive number", value=step))
        elif ceiling is not None and (not _is_number(ceiling) or (step is not None and ceiling < step)):
            errors.append(ValidationError(field="psar_max", message="Must be at least psar_step", value=ceiling))

        errors.extend(_check_ordered(params, "macd_fast", "macd_slow"))
        errors.extend(_check_ordered(params, "ema_fast", "ema_slow"))
        errors.extend(_check_ordered(params, "sma_fast", "sma_slow"))
        return errors

    @staticmethod
    def validate_regime_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate regime classification thresholds."""
        errors = _check_positive_ints(params, ["min_bars", "average_period", "early_phase_bars"])

        for name in ("volatile_threshold", "forced_hold_volatility", "oversold_rsi",
                     "overbought_rsi", "exhaustion_rsi_high", "exhaustion_rsi_low",
                     "ranging_hold_strength"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value < 0 or value > 100:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a number between 0 and 100",
                        value=value
                    ))

        errors.extend(_check_non_negative(params, [
            "adx_trending", "adx_ranging", "adx_tiebreak", "squeeze_ratio",
            "volume_surge_ratio", "phase_emphasis", "phase_fade",
        ]))

        for name in ("aligned_boost_divisor", "counter_damp_divisor"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value <= 0:
                    errors.append(ValidationError(field=name, message="Must be a positive number", value=value))
        return errors

    @staticmethod
    def validate_forecast_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate momentum forecaster parameters."""
        errors = _check_positive_ints(params, ["window", "min_bars", "medium_min_bars", "noise_lookback"])

        if "window" in params and _is_int(params["window"]) and params["window"] < 6:
            errors.append(ValidationError(
                field="window",
                message="Must cover at least 6 bars",
                value=params["window"]
            ))

        if "noise_bars" in params:
            value = params["noise_bars"]
            if not _is_int(value) or value < 0:
                errors.append(ValidationError(field="noise_bars", message="Must be a non-negative integer", value=value))

        errors.extend(_check_non_negative(params, [
            "momentum_weight", "acceleration_weight", "volume_weight",
            "confidence_scale", "acceleration_threshold", "surge_threshold",
            "fractal_penalty",
        ]))
        errors.extend(_check_fractions(params, ["short_term_share", "medium_only_share"]))

        if "dead_zone_pct" in params:
            value = params["dead_zone_pct"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(field="dead_zone_pct", message="Must be a positive number", value=value))

        if "seed" in params:
            value = params["seed"]
            if value is not None and (not _is_int(value) or value < 0):
                errors.append(ValidationError(field="seed", message="Must be null or a non-negative integer", value=value))
        return errors

    @staticmethod
    def validate_timeframe_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate multi-timeframe parameters."""
        errors = _check_positive_ints(params, ["min_base_bars", "min_resampled_bars", "min_timeframes"])
        errors.extend(_check_fractions(params, ["dominant_share"]))

        if "timeframes" in params:
            value = params["timeframes"]
            entries = value if isinstance(value, (list, tuple)) else None
            if not entries:
                errors.append(ValidationError(field="timeframes", message="Must be a non-empty list", value=value))
            else:
                for entry in entries:
                    valid = (
                        isinstance(entry, (list, tuple)) and len(entry) == 3
                        and isinstance(entry[0], str)
                        and _is_int(entry[1]) and entry[1] > 0
                        and _is_number(entry[2]) and entry[2] > 0
                    )
                    if not valid:
                        errors.append(ValidationError(
                            field="timeframes",
                            message="Entries must be (label, positive multiplier, positive weight)",
                            value=entry
                        ))
        return errors

    @staticmethod
    def validate_decision_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate consensus decision thresholds."""
        errors = _check_fractions(params, [
            "min_signal_share", "relaxed_share", "majority_share", "hold_share",
            "strong_share", "moderate_aligned_factor", "moderate_factor",
            "default_hold_factor", "forecast_hold_factor",
        ])

        for name in ("confirmation_ratio", "relaxed_ratio"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value < 1:
                    errors.append(ValidationError(field=name, message="Must be a number of at least 1", value=value))

        for name in ("base_confidence", "confidence_contribution", "forecast_min_confidence",
                     "forecast_agreement_min_confidence", "forecast_hold_min_confidence"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value < 0 or value > 100:
                    errors.append(ValidationError(field=name, message="Must be a number between 0 and 100", value=value))

        errors.extend(_check_non_negative(params, [
            "strong_share_bonus", "forecast_agreement_bonus", "forecast_disagreement_penalty", "forecast_hold_bonus",
            "hold_volatility_threshold",
        ]))

        # Vote weights are scaled by these and must stay positive
        for name in ("forecast_change_divisor", "timeframe_weight_divisor",
                     "forecast_max_weight", "forecast_weight_scale", "forecast_max_change_multiplier",
                     "early_signal_boost", "regime_boost", "regime_damp", "volatile_boost",
                     "accumulation_boost", "hold_volatile_factor", "hold_calm_factor"):
            if name in params:
                value = params[name]
                if not _is_number(value) or value <= 0:
                    errors.append(ValidationError(field=name, message="Must be a positive number", value=value))
        return errors

    @staticmethod
    def validate_target_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate price target parameters."""
        errors = []

        if "stop_atr_multiplier" in params:
            value = params["stop_atr_multiplier"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(field="stop_atr_multiplier", message="Must be a positive number", value=value))

        if "target_multiples" in params:
            value = params["target_multiples"]
            valid = (
                isinstance(value, (list, tuple)) and len(value) == 3
                and all(_is_number(m) and m > 0 for m in value)
                and value[0] < value[1] < value[2]
            )
            if not valid:
                errors.append(ValidationError(
                    field="target_multiples",
                    message="Must be three strictly increasing positive numbers",
                    value=value
                ))

        if "risk_reward_ratio" in params:
            value = params["risk_reward_ratio"]
            if not _is_number(value) or value <= 0:
                errors.append(ValidationError(field="risk_reward_ratio", message="Must be a positive number", value=value))
        return errors


def validate_config(config: EngineConfig) -> list[ValidationError]:
    """Validate every section of an EngineConfig."""
    errors = []
    errors.extend(ConfigValidator.validate_indicator_params(asdict(config.indicators)))
    errors.extend(ConfigValidator.validate_regime_params(asdict(config.regime)))
    errors.extend(ConfigValidator.validate_forecast_params(asdict(config.forecast)))
    errors.extend(ConfigValidator.validate_timeframe_params(asdict(config.timeframes)))
    errors.extend(ConfigValidator.validate_decision_params(asdict(config.decision)))
    errors.extend(ConfigValidator.validate_target_params(asdict(config.targets)))

    if not _is_int(config.min_bars) or config.min_bars <= 0:
        errors.append(ValidationError(field="min_bars", message="Must be a positive integer", value=config.min_bars))
    return errors


def ensure_valid_config(config: EngineConfig) -> EngineConfig:
    """
    Validate a configuration and fail fast on the first problem set.

    Raises:
        ConfigurationError: If any parameter is invalid
    """
    errors = validate_config(config)
    if errors:
        summary = "; ".join(f"{e.field}: {e.message} (got {e.value!r})" for e in errors)
        raise ConfigurationError(
            f"Invalid configuration: {summary}",
            field=errors[0].field,
            value=errors[0].value,
            errors=errors,
        )
    return config
