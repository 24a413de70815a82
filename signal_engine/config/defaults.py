"""Default configuration parameters for the signal engine."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class IndicatorParams:
    """Indicator periods and multipliers shared by the signal generators."""
    # Moving averages
    sma_fast: int = 20
    sma_slow: int = 50
    sma_long: int = 200
    ema_fast: int = 9
    ema_slow: int = 21
    ema_regime: int = 10
    sma_cross_lookback: int = 20         # Bars within which an SMA cross counts as fresh

    # Oscillators
    rsi_period: int = 14
    macd_fast: int = 12
    macd_slow: int = 26
    macd_signal: int = 9
    stochastic_k: int = 14
    stochastic_d: int = 3
    roc_period: int = 9
    momentum_period: int = 10

    # Volatility
    bollinger_period: int = 20
    bollinger_std: float = 2.0
    atr_period: int = 14
    adx_period: int = 14
    psar_step: float = 0.02
    psar_max: float = 0.2

    # Volume
    vwap_period: int = 14
    cmf_period: int = 20
    volume_average_period: int = 10

    # Support / resistance
    sr_lookback: int = 50
    sr_window: int = 5
    sr_tolerance: float = 0.005          # Touches within 0.5% count as the same level
    sr_merge_distance: float = 0.01      # Levels within 1% are deduplicated
    sr_max_levels: int = 3


@dataclass(frozen=True)
class RegimeParams:
    """Market regime classification thresholds."""
    min_bars: int = 50
    volatile_threshold: float = 70.0     # Volatility score above which regime is VOLATILE
    forced_hold_volatility: float = 85.0
    adx_trending: float = 25.0
    adx_ranging: float = 20.0
    adx_tiebreak: float = 15.0
    average_period: int = 20             # ATR and band-width averaging window
    squeeze_ratio: float = 0.85
    volume_surge_ratio: float = 1.3
    oversold_rsi: float = 35.0
    overbought_rsi: float = 65.0
    exhaustion_rsi_high: float = 70.0
    exhaustion_rsi_low: float = 30.0
    early_phase_bars: int = 10
    ranging_hold_strength: float = 65.0

    # Confidence rescaling
    aligned_boost_divisor: float = 200.0
    counter_damp_divisor: float = 150.0
    phase_emphasis: float = 1.25
    phase_fade: float = 0.75


@dataclass(frozen=True)
class ForecastParams:
    """Momentum forecaster parameters."""
    window: int = 30
    min_bars: int = 30
    momentum_weight: float = 0.4
    acceleration_weight: float = 0.4
    volume_weight: float = 0.2
    dead_zone_pct: float = 0.08
    confidence_scale: float = 15.0
    acceleration_threshold: float = 0.001
    acceleration_boost: float = 1.2
    surge_threshold: float = 1.5
    surge_boost: float = 1.15
    surge_alignment_boost: float = 1.1

    # Medium-term noise step
    medium_min_bars: int = 50
    noise_bars: int = 5
    noise_lookback: int = 20
    seed: Optional[int] = None

    # Combination and overrides
    short_term_share: float = 0.7
    medium_only_share: float = 0.6
    divergence_confidence_floor: float = 60.0
    override_ceiling: float = 90.0
    fractal_penalty: float = 10.0
    mtf_confirm_alignment: float = 70.0
    mtf_override_alignment: float = 60.0
    mtf_override_change: float = 0.5
    mtf_override_cap: float = 85.0


@dataclass(frozen=True)
class TimeframeParams:
    """Multi-timeframe aggregation parameters."""
    min_base_bars: int = 200
    min_resampled_bars: int = 30
    min_timeframes: int = 2
    dominant_share: float = 0.5
    # (label, bars per bucket, vote weight)
    timeframes: tuple = field(default_factory=lambda: (
        ("1m", 1, 0.2),
        ("5m", 5, 0.4),
        ("15m", 15, 0.6),
        ("30m", 30, 0.8),
        ("1h", 60, 1.0),
        ("4h", 240, 1.5),
        ("1d", 1440, 2.0),
    ))


@dataclass(frozen=True)
class DecisionParams:
    """Consensus decision thresholds."""
    confirmation_ratio: float = 1.5      # buy weight must exceed sell weight by this ratio
    min_signal_share: float = 0.18       # minimum share of total weight for a confirmed verdict
    relaxed_ratio: float = 1.2
    relaxed_share: float = 0.4
    majority_share: float = 0.5
    hold_share: float = 0.30
    base_confidence: float = 20.0
    confidence_contribution: float = 87.0
    strong_share: float = 0.45
    strong_share_bonus: float = 12.0
    forecast_agreement_bonus: float = 8.0
    forecast_disagreement_penalty: float = 10.0
    forecast_agreement_min_confidence: float = 50.0
    forecast_hold_bonus: float = 5.0
    forecast_hold_min_confidence: float = 55.0
    moderate_aligned_factor: float = 0.9
    moderate_factor: float = 0.85
    default_hold_factor: float = 0.7

    # Forecaster and multi-timeframe votes
    forecast_min_confidence: float = 40.0
    forecast_max_weight: float = 3.5
    forecast_weight_scale: float = 4.0
    forecast_change_divisor: float = 1.5
    forecast_max_change_multiplier: float = 2.0
    forecast_hold_factor: float = 0.8
    timeframe_weight_divisor: float = 25.0

    # Regime weight modulation
    early_signal_boost: float = 1.5
    regime_boost: float = 1.3
    regime_damp: float = 0.8
    volatile_boost: float = 1.4
    accumulation_boost: float = 1.2
    hold_volatility_threshold: float = 70.0
    hold_volatile_factor: float = 1.2
    hold_calm_factor: float = 0.8


@dataclass(frozen=True)
class TargetParams:
    """Price target parameters."""
    stop_atr_multiplier: float = 2.0
    target_multiples: tuple = (1.5, 3.0, 5.0)
    risk_reward_ratio: float = 3.0


@dataclass(frozen=True)
class EngineConfig:
    """Complete engine configuration."""
    indicators: IndicatorParams
    regime: RegimeParams
    forecast: ForecastParams
    timeframes: TimeframeParams
    decision: DecisionParams
    targets: TargetParams
    min_bars: int = 50


def get_default_config() -> EngineConfig:
    """Get the default configuration instance."""
    return EngineConfig(
        indicators=IndicatorParams(),
        regime=RegimeParams(),
        forecast=ForecastParams(),
        timeframes=TimeframeParams(),
        decision=DecisionParams(),
        targets=TargetParams(),
    )
