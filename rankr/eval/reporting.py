# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Evaluation report writer.

    <output_dir>/
    ├── metrics.json          machine-readable aggregate and per-query metrics
    ├── report.txt            human-readable summary
    └── config_snapshot.yaml  the config used for this evaluation (optional)

metrics.json is the authoritative output; report.txt is a convenience view
of the same numbers. A comparison between two runs goes to comparison.json.
"""

import json
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path

import yaml

from rankr.eval.models import EvalResult, RunComparison
from rankr.logging.logger import get_logger
from rankr.utils.filesystem import atomic_write

logger = get_logger(__name__)

SIGNIFICANCE_LEVEL = 0.05


def write_report(
    result: EvalResult,
    output_dir: Path,
    config_snapshot: dict[str, object] | None = None,
) -> Path:
    """Write metrics.json, report.txt and (optionally) config_snapshot.yaml."""
    output_dir.mkdir(parents=True, exist_ok=True)

    atomic_write(
        output_dir / "metrics.json",
        json.dumps(asdict(result), indent=2, sort_keys=True, default=str),
    )
    atomic_write(output_dir / "report.txt", format_report_text(result))

    if config_snapshot is not None:
        atomic_write(
            output_dir / "config_snapshot.yaml",
            yaml.dump(config_snapshot, default_flow_style=False, sort_keys=True),
        )

    logger.info("Evaluation report written", extra={"output_dir": str(output_dir)})
    return output_dir


def format_report_text(result: EvalResult) -> str:
    timestamp = datetime.now(tz=timezone.utc).isoformat()
    width = max((len(name) for name in result.metric_names), default=4)
    lines: list[str] = [
        "=" * 60,
        "RANKR EVALUATION REPORT",
        f"Generated: {timestamp}",
        f"Run: {result.run_tag}",
        "=" * 60,
        "",
        "--- AGGREGATE METRICS ---",
    ]
    for name in result.metric_names:
        lines.append(f"{name:<{width}}  {result.aggregate.get(name, 0.0):.4f}")

    lines.extend(
        [
            "",
            "--- SUMMARY ---",
            f"Judged Queries: {result.num_queries}",
            f"Missing From Run: {len(result.missing_queries)}",
            f"Unjudged In Run: {len(result.unjudged_queries)}",
            f"Relevance Threshold: {result.relevance_threshold}",
        ]
    )

    if result.missing_queries:
        lines.extend(["", "--- QUERIES MISSING FROM RUN ---"])
        lines.extend(f"  {query_id}" for query_id in result.missing_queries)

    lines.extend(["", "=" * 60])
    return "\n".join(lines) + "\n"


def format_comparison_text(comparison: RunComparison) -> str:
    verdict = "significant" if comparison.p_value < SIGNIFICANCE_LEVEL else "not significant"
    return "\n".join(
        [
            f"Metric: {comparison.metric}",
            f"{comparison.run_a}: {comparison.mean_a:.4f}",
            f"{comparison.run_b}: {comparison.mean_b:.4f}",
            f"Difference: {comparison.mean_difference:+.4f}",
            f"Wins/Losses/Ties: {comparison.wins}/{comparison.losses}/{comparison.ties}",
            f"p-value: {comparison.p_value:.4f} ({verdict} at {SIGNIFICANCE_LEVEL})",
        ]
    ) + "\n"


def write_comparison(comparison: RunComparison, output_dir: Path) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / "comparison.json"
    atomic_write(path, json.dumps(asdict(comparison), indent=2, sort_keys=True))
    logger.info("Run comparison written", extra={"path": str(path)})
    return path
