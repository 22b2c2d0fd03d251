#!/usr/bin/env python3
# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Retrieval quality regression detection for CI.

Compares the aggregate metrics in a `rankr eval` metrics.json against a
baseline metrics.json. Fails if any baseline metric drops by more than the
allowed relative threshold, or disappears from the current results.

Usage:
    python scripts/ci/regression_check.py --baseline <baseline/metrics.json> --current <metrics.json>
    python scripts/ci/regression_check.py --baseline <baseline/metrics.json> --current <metrics.json> --threshold 0.02
"""

import argparse
import json
import sys


def load_metrics(path: str) -> dict[str, float]:
    """Read the `aggregate` block of a metrics.json written by `rankr eval`."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    aggregate = data.get("aggregate", {})
    return {name: float(value) for name, value in aggregate.items()}


def check_regressions(
    baseline: dict[str, float],
    current: dict[str, float],
    threshold: float,
) -> list[str]:
    """
    A regression is a relative drop larger than `threshold`: baseline MAP
    0.40 and current 0.37 is a 7.5% drop, which fails a 5% threshold.

    Returns the error messages; empty means no regressions.
    """
    errors: list[str] = []

    for metric_name, baseline_value in sorted(baseline.items()):
        if metric_name not in current:
            errors.append(f"Missing metric in current results: {metric_name}")
            continue

        current_value = current[metric_name]
        if baseline_value == 0:
            continue

        relative_drop = (baseline_value - current_value) / baseline_value
        if relative_drop > threshold:
            errors.append(
                f"REGRESSION: {metric_name} dropped from "
                f"{baseline_value:.4f} to {current_value:.4f} "
                f"({relative_drop:.1%} regression, threshold: {threshold:.1%})"
            )

    return errors


def main() -> int:
    parser = argparse.ArgumentParser(description="Check for retrieval metric regressions")
    parser.add_argument("--baseline", required=True, help="Path to baseline metrics.json")
    parser.add_argument("--current", required=True, help="Path to current metrics.json")
    parser.add_argument(
        "--threshold",
        type=float,
        default=0.05,
        help="Maximum allowed relative regression (default: 0.05 = 5%%)",
    )
    args = parser.parse_args()

    print(f"Baseline: {args.baseline}")
    print(f"Current:  {args.current}")
    print(f"Threshold: {args.threshold:.1%}")
    print()

    try:
        baseline = load_metrics(args.baseline)
        current = load_metrics(args.current)
    except (FileNotFoundError, json.JSONDecodeError) as err:
        print(f"ERROR: Failed to load metrics: {err}")
        return 1

    errors = check_regressions(baseline, current, args.threshold)

    if errors:
        print("=== REGRESSIONS DETECTED ===")
        for error in errors:
            print(f"  FAIL {error}")
        return 1

    print("=== No regressions detected ===")
    for name in sorted(baseline):
        print(f"  ok {name}: {baseline[name]:.4f} -> {current.get(name, 0.0):.4f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
