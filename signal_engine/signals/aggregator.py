"""
Weighted consensus over the per-indicator votes.

Votes are rescaled for the market regime, summed per verdict and turned into
an overall signal with a confidence score. Price targets are derived from ATR
for directional verdicts.
"""

from collections.abc import Mapping
from typing import Optional

import numpy as np

from ..analysis.regime import adjust_for_regime
from ..config.defaults import DecisionParams, RegimeParams, TargetParams
from ..data.models import PriceArrays
from ..indicators import SupportResistance, calculate_atr
from ..logging import get_decision_logger, log_signal_decision
from ..models import (
    Direction,
    IndicatorSignal,
    MarketRegime,
    MomentumForecast,
    PriceTargets,
    RegimeType,
    SignalType,
    SignalWeights,
    TimeframeAnalysis,
)

decision_logger = get_decision_logger(__name__)

FORECAST_KEY = "Momentum Forecast"
TIMEFRAME_KEY = "Multi-Timeframe"

TREND_KEYS = frozenset({"Trend Consistency", "ADX", "EMA Cross", "SMA Cross"})
OSCILLATOR_KEYS = frozenset({"RSI", "Stochastic"})
RANGE_KEYS = frozenset({"RSI", "Stochastic", "Bollinger"})
RANGE_DAMPED_KEYS = frozenset({"Trend Consistency", "ADX", "SMA Cross"})
VOLATILITY_KEYS = frozenset({"Volume Flow", "Bollinger", "PSAR"})

# (buy, sell, hold) share threshold multipliers per regime
REGIME_THRESHOLD_FACTORS = {
    (RegimeType.TRENDING, Direction.UP): (0.85, 1.2, 1.0),
    (RegimeType.TRENDING, Direction.DOWN): (1.2, 0.85, 1.0),
    (RegimeType.RANGING, None): (1.1, 1.1, 0.9),
    (RegimeType.VOLATILE, None): (1.2, 1.2, 0.8),
    (RegimeType.ACCUMULATION, None): (0.8, 1.3, 1.0),
    (RegimeType.DISTRIBUTION, None): (1.3, 0.8, 1.0),
}


def _is_early_signal(name: str) -> bool:
    return name.startswith("Early") or name == "Price Acceleration"


def _regime_factor(name: str, vote: IndicatorSignal, regime: MarketRegime, params: DecisionParams) -> float:
    factor = 1.0
    if _is_early_signal(name):
        factor *= params.early_signal_boost

    kind = regime.regime
    if kind == RegimeType.TRENDING:
        if name in TREND_KEYS:
            factor *= params.regime_boost
        if name in OSCILLATOR_KEYS:
            factor *= params.regime_damp
    elif kind == RegimeType.RANGING:
        if name in RANGE_KEYS:
            factor *= params.regime_boost
        if name in RANGE_DAMPED_KEYS:
            factor *= params.regime_damp
    elif kind == RegimeType.VOLATILE:
        if name in VOLATILITY_KEYS:
            factor *= params.volatile_boost
    elif kind in (RegimeType.ACCUMULATION, RegimeType.DISTRIBUTION):
        favoured = SignalType.BUY if kind == RegimeType.ACCUMULATION else SignalType.SELL
        if name == "Volume Flow" or "Divergence" in name:
            factor *= params.early_signal_boost
        if vote.signal == favoured:
            factor *= params.accumulation_boost

    if vote.signal == SignalType.HOLD:
        volatile = regime.volatility > params.hold_volatility_threshold
        factor *= params.hold_volatile_factor if volatile else params.hold_calm_factor
    return factor


def modulate_weights(
    indicators: Mapping[str, IndicatorSignal],
    regime: Optional[MarketRegime] = None,
    params: Optional[DecisionParams] = None,
) -> dict[str, IndicatorSignal]:
    """
    Rescale vote weights for the market regime.

    Early-detection votes are boosted in every regime; trend votes gain and
    oscillators lose weight in a trend, the reverse holds in a range;
    volatility and volume votes gain in a volatile market; accumulation and
    distribution favour their side. HOLD votes gain weight when volatility is
    high and lose it otherwise. The forecaster vote is left untouched.
    """
    params = params or DecisionParams()
    if regime is None or regime.regime == RegimeType.UNDEFINED:
        return dict(indicators)

    modulated = {}
    for name, vote in indicators.items():
        if name == FORECAST_KEY:
            modulated[name] = vote
        else:
            modulated[name] = vote.scaled(_regime_factor(name, vote, regime, params))
    return modulated


def compute_signal_weights(
    indicators: Mapping[str, IndicatorSignal],
    regime: Optional[MarketRegime] = None,
    params: Optional[DecisionParams] = None,
) -> SignalWeights:
    """Sum regime-modulated vote weights per verdict."""
    totals = {signal: 0.0 for signal in SignalType}
    for vote in modulate_weights(indicators, regime, params).values():
        totals[vote.signal] += vote.weight
    return SignalWeights(
        buy=totals[SignalType.BUY],
        sell=totals[SignalType.SELL],
        hold=totals[SignalType.HOLD],
        neutral=totals[SignalType.NEUTRAL],
    )


def build_forecast_vote(forecast: MomentumForecast, params: Optional[DecisionParams] = None) -> Optional[IndicatorSignal]:
    """
    Fold the forecaster into the vote.

    Weight grows with confidence and predicted magnitude and is capped; HOLD
    forecasts count at a discount. No vote below the minimum confidence.
    """
    params = params or DecisionParams()
    if forecast.confidence <= params.forecast_min_confidence:
        return None

    base = min(params.forecast_max_weight, forecast.confidence / 100 * params.forecast_weight_scale)
    change = min(
        params.forecast_max_change_multiplier,
        1 + abs(forecast.predicted_change_percent) / params.forecast_change_divisor,
    )
    weight = base * change
    if forecast.prediction == SignalType.HOLD:
        weight *= params.forecast_hold_factor
    return IndicatorSignal(signal=forecast.prediction, weight=weight, confidence=forecast.confidence)


def build_timeframe_vote(analysis: TimeframeAnalysis, params: Optional[DecisionParams] = None) -> Optional[IndicatorSignal]:
    """Vote for the dominant timeframe direction, weighted by alignment."""
    params = params or DecisionParams()
    if analysis.alignment_score <= 0:
        return None

    signal = {
        Direction.UP: SignalType.BUY,
        Direction.DOWN: SignalType.SELL,
    }.get(analysis.dominant_direction, SignalType.NEUTRAL)
    return IndicatorSignal(
        signal=signal,
        weight=analysis.alignment_score / params.timeframe_weight_divisor,
        confidence=min(100.0, max(0.0, analysis.weighted_confidence)),
    )


def regime_thresholds(regime: Optional[MarketRegime], params: Optional[DecisionParams] = None) -> tuple[float, float, float]:
    """Buy, sell and hold share thresholds adjusted for the regime."""
    params = params or DecisionParams()
    buy = sell = params.min_signal_share
    hold = params.hold_share
    if regime is None:
        return buy, sell, hold

    factors = REGIME_THRESHOLD_FACTORS.get((regime.regime, regime.direction))
    if factors is None:
        factors = REGIME_THRESHOLD_FACTORS.get((regime.regime, None), (1.0, 1.0, 1.0))
    return buy * factors[0], sell * factors[1], hold * factors[2]


def calculate_confidence(signal_weight: float, total_weight: float, params: Optional[DecisionParams] = None) -> float:
    """Base confidence plus a capped contribution proportional to the share."""
    params = params or DecisionParams()
    if total_weight <= 0:
        return 0.0
    contribution = min(params.confidence_contribution, signal_weight / total_weight * params.confidence_contribution)
    return min(100.0, params.base_confidence + contribution)


def _confirmed(side: float, other: float, share: float, threshold: float, params: DecisionParams) -> bool:
    return (
        (side > params.confirmation_ratio * other and share > threshold)
        or (side > params.relaxed_ratio * other and share > params.relaxed_share)
        or share > params.majority_share
    )


def _forecast_adjustment(signal: SignalType, forecast: Optional[MomentumForecast], params: DecisionParams) -> float:
    if forecast is None or forecast.confidence <= params.forecast_agreement_min_confidence:
        return 0.0
    opposite = SignalType.SELL if signal == SignalType.BUY else SignalType.BUY
    if forecast.prediction == signal:
        return params.forecast_agreement_bonus
    if forecast.prediction == opposite:
        return -params.forecast_disagreement_penalty
    return 0.0


def determine_overall_signal(
    weights: SignalWeights,
    regime: Optional[MarketRegime] = None,
    forecast: Optional[MomentumForecast] = None,
    params: Optional[DecisionParams] = None,
    regime_params: Optional[RegimeParams] = None,
) -> tuple[SignalType, float]:
    """
    Turn summed weights into a verdict and confidence.

    Order: confirmed BUY, confirmed SELL, HOLD when its share clears the
    threshold, a softer majority BUY/SELL, and HOLD otherwise. The result is
    finally rescaled for the regime.

    Returns:
        Tuple of (signal, confidence) with confidence in [0, 100]
    """
    params = params or DecisionParams()
    total = weights.total
    if total <= 0:
        return SignalType.NEUTRAL, 0.0

    buy_threshold, sell_threshold, hold_threshold = regime_thresholds(regime, params)
    buy_share, sell_share, hold_share = weights.share(weights.buy), weights.share(weights.sell), weights.share(weights.hold)
    direction = regime.direction if regime else Direction.NEUTRAL

    if _confirmed(weights.buy, weights.sell, buy_share, buy_threshold, params):
        signal = SignalType.BUY
        confidence = calculate_confidence(weights.buy, total, params)
        if buy_share > params.strong_share:
            confidence += params.strong_share_bonus
        confidence += _forecast_adjustment(signal, forecast, params)
    elif _confirmed(weights.sell, weights.buy, sell_share, sell_threshold, params):
        signal = SignalType.SELL
        confidence = calculate_confidence(weights.sell, total, params)
        if sell_share > params.strong_share:
            confidence += params.strong_share_bonus
        confidence += _forecast_adjustment(signal, forecast, params)
    elif hold_share > hold_threshold and weights.hold > 0:
        signal = SignalType.HOLD
        confidence = calculate_confidence(weights.hold + weights.neutral, total, params)
        if (
            forecast is not None
            and forecast.prediction == SignalType.HOLD
            and forecast.confidence > params.forecast_hold_min_confidence
        ):
            confidence += params.forecast_hold_bonus
    elif weights.buy > weights.sell and weights.buy > weights.hold:
        signal = SignalType.BUY
        factor = params.moderate_aligned_factor if direction == Direction.UP else params.moderate_factor
        confidence = calculate_confidence(weights.buy, total, params) * factor
    elif weights.sell > weights.buy and weights.sell > weights.hold:
        signal = SignalType.SELL
        factor = params.moderate_aligned_factor if direction == Direction.DOWN else params.moderate_factor
        confidence = calculate_confidence(weights.sell, total, params) * factor
    else:
        signal = SignalType.HOLD
        confidence = calculate_confidence(max(weights.buy, weights.sell), total, params) * params.default_hold_factor

    confidence = min(100.0, max(0.0, confidence))
    if regime is not None and regime.regime != RegimeType.UNDEFINED:
        signal, confidence = adjust_for_regime(signal, confidence, regime, regime_params)

    confidence = round(confidence, 2)
    log_signal_decision(
        decision_logger,
        signal=signal.value,
        confidence=confidence,
        weights=weights.to_dict(),
        regime=regime.regime.value if regime else None,
        context={
            "thresholds": {
                "buy": round(buy_threshold, 4),
                "sell": round(sell_threshold, 4),
                "hold": round(hold_threshold, 4),
            },
            "forecast": forecast.prediction.value if forecast else None,
        },
    )
    return signal, confidence


def calculate_price_targets(
    arrays: PriceArrays,
    signal: SignalType,
    levels: Optional[SupportResistance] = None,
    params: Optional[TargetParams] = None,
    atr_period: int = 14,
) -> Optional[PriceTargets]:
    """
    ATR-based stop and staged targets for a directional verdict.

    The stop sits `stop_atr_multiplier` ATRs beyond the entry and is pulled in
    to the nearest significant support (BUY) or resistance (SELL) lying
    strictly between the stop and the entry. Targets are the risk distance
    times each configured multiple.

    Returns:
        PriceTargets, or None for HOLD/NEUTRAL or an undefined ATR
    """
    params = params or TargetParams()
    if signal not in (SignalType.BUY, SignalType.SELL) or len(arrays) == 0:
        return None

    atr = float(calculate_atr(arrays, atr_period)[-1])
    if np.isnan(atr) or atr <= 0:
        return None

    entry = arrays.last_price
    is_buy = signal == SignalType.BUY
    offset = atr * params.stop_atr_multiplier
    stop = entry - offset if is_buy else entry + offset

    if levels is not None:
        if is_buy:
            inside = [level for level in levels.significant_support if stop < level < entry]
            if inside:
                stop = max(inside)
        else:
            inside = [level for level in levels.significant_resistance if entry < level < stop]
            if inside:
                stop = min(inside)

    risk = abs(entry - stop)
    direction = 1.0 if is_buy else -1.0
    target1, target2, target3 = (entry + direction * risk * multiple for multiple in params.target_multiples)

    return PriceTargets(
        entry_price=entry,
        stop_loss=stop,
        target1=target1,
        target2=target2,
        target3=target3,
        risk_reward_ratio=params.risk_reward_ratio,
    )
