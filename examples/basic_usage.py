#!/usr/bin/env python3
"""
Basic Usage Example - Consensus Signal Engine

This script demonstrates the basic usage of the signal engine with
simulated market data. It shows how to:
- Parse a Binance-style kline payload into candles
- Initialize the engine with a reproducible random source
- Evaluate a series and read the consensus summary
- Evaluate several series concurrently

Run: python examples/basic_usage.py
"""

import time
from typing import Any, List

import numpy as np
import orjson

from signal_engine import SignalEngine
from signal_engine.analysis import create_random_source
from signal_engine.data import parse_kline_json
from signal_engine.logging import configure_logging
from signal_engine.models import SignalSummary


def create_kline_rows(start_ms: int, count: int, start_price: float, drift: float, seed: int) -> List[List[Any]]:
    """Create Binance-format 1m kline rows from a seeded random walk."""
    rng = np.random.default_rng(seed)
    rows = []
    price = start_price
    for i in range(count):
        open_price = price
        close_price = max(0.01, open_price * (1 + drift + rng.normal(0.0, 0.002)))
        wick = abs(rng.normal(0.0, 0.001)) * open_price
        high = max(open_price, close_price) + wick
        low = min(open_price, close_price) - wick
        volume = 50 + rng.random() * 25 + (i / count) * 40
        open_time = start_ms + i * 60_000
        rows.append([
            open_time,
            f"{open_price:.2f}",
            f"{high:.2f}",
            f"{low:.2f}",
            f"{close_price:.2f}",
            f"{volume:.4f}",
            open_time + 59_999,
        ])
        price = float(f"{close_price:.2f}")
    return rows


def print_summary(name: str, summary: SignalSummary) -> None:
    """Print the headline fields of a summary."""
    print(f"📊 {name}")
    print(f"  Signal: {summary.overall_signal.value} ({summary.confidence:.1f}% confidence)")

    if summary.regime:
        phase = summary.regime.phase.value if summary.regime.phase else "-"
        print(f"  Regime: {summary.regime.regime.value} {summary.regime.direction.value} (phase {phase})")

    if summary.forecast:
        print(f"  Forecast: {summary.forecast.prediction.value} {summary.forecast.predicted_change_percent:+.2f}%")

    if summary.timeframes:
        print(f"  Timeframes: {summary.timeframes.dominant_direction.value}, "
              f"{summary.timeframes.alignment_score:.0f}% aligned")

    targets = summary.price_targets
    if targets:
        print(f"  Entry: {targets.entry_price:.2f}  Stop: {targets.stop_loss:.2f}")
        print(f"  Targets: {targets.target1:.2f} / {targets.target2:.2f} / {targets.target3:.2f}")

    print("  Top explanations:")
    for signal in summary.signals[:5]:
        print(f"    [{signal.signal.value:>7}] {signal.indicator}: {signal.message}")
    print("-" * 60)


def main():
    """Main demonstration function."""
    configure_logging(level="WARNING")

    print("🚀 Consensus Signal Engine - Basic Usage Demo")
    print("=" * 60)

    base_timestamp = (int(time.time() * 1000) // 60_000 - 400) * 60_000

    print("1. Parsing kline payloads...")
    payloads = {
        "BTCUSDT:1m": orjson.dumps(create_kline_rows(base_timestamp, 320, 45000.0, 0.0008, seed=1)),
        "ETHUSDT:1m": orjson.dumps(create_kline_rows(base_timestamp, 320, 3300.0, -0.0008, seed=2)),
        "SOLUSDT:1m": orjson.dumps(create_kline_rows(base_timestamp, 120, 150.0, 0.0, seed=3)),
    }
    series = {key: parse_kline_json(payload) for key, payload in payloads.items()}
    for key, candles in series.items():
        print(f"   {key}: {len(candles)} candles, last close {candles[-1].close}")
    print()

    print("2. Evaluating a single series with a seeded engine...")
    engine = SignalEngine(rng_factory=lambda: create_random_source(42))
    summary = engine.evaluate(series["BTCUSDT:1m"])
    print_summary("BTCUSDT:1m", summary)

    print("3. Reproducibility check...")
    repeat = engine.evaluate(series["BTCUSDT:1m"])
    print(f"   Identical output: {summary.to_json() == repeat.to_json()}")
    print()

    print("4. Evaluating all series concurrently...")
    results = engine.evaluate_many(series)
    for key, result in results.items():
        print_summary(key, result)

    print("5. Insufficient data...")
    short = engine.evaluate(series["SOLUSDT:1m"][:20])
    print(f"   20 candles -> {short.overall_signal.value} with {short.confidence:.0f}% confidence")
    print()

    print("6. Symbol configuration...")
    btc_engine = SignalEngine.for_symbol("BTCUSDT")
    print(f"   BTCUSDT stop multiplier: {btc_engine.config.targets.stop_atr_multiplier}")
    print(f"   BTCUSDT forecast seed: {btc_engine.config.forecast.seed}")
    btc_summary = btc_engine.evaluate(series["BTCUSDT:1m"])
    if btc_summary.price_targets:
        risk = abs(btc_summary.price_targets.entry_price - btc_summary.price_targets.stop_loss)
        print(f"   Risk per unit with wider stop: {risk:.2f}")
    print(f"   Summary JSON size: {len(btc_summary.to_json())} bytes")

    print()
    print("✅ Demo completed successfully!")


if __name__ == "__main__":
    main()
