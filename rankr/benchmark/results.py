# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Write benchmark results as results.json (nested) and results.csv (flat)."""

import csv
import io
import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Sequence

from rankr.benchmark.runner import BenchmarkResult
from rankr.logging.logger import get_logger
from rankr.utils.filesystem import atomic_write

logger = get_logger(__name__)


def _flatten(prefix: str, value: Any, out: dict[str, Any]) -> None:
    if isinstance(value, dict):
        for key, inner in value.items():
            _flatten(f"{prefix}{key}." if isinstance(inner, dict) else f"{prefix}{key}", inner, out)
    else:
        out[prefix] = value


def result_rows(results: Sequence[BenchmarkResult]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for result in results:
        row: dict[str, Any] = {}
        _flatten("", asdict(result), row)
        rows.append(row)
    return rows


def write_benchmark_results(results: Sequence[BenchmarkResult], output_dir: Path) -> list[Path]:
    output_dir.mkdir(parents=True, exist_ok=True)

    json_path = output_dir / "results.json"
    atomic_write(
        json_path,
        json.dumps([asdict(r) for r in results], indent=2, sort_keys=True),
    )

    rows = result_rows(results)
    csv_path = output_dir / "results.csv"
    buffer = io.StringIO()
    if rows:
        writer = csv.DictWriter(buffer, fieldnames=list(rows[0]), lineterminator="\n")
        writer.writeheader()
        writer.writerows(rows)
    atomic_write(csv_path, buffer.getvalue())

    logger.info(
        "Benchmark results written",
        extra={"output_dir": str(output_dir), "results": len(results)},
    )
    return [json_path, csv_path]
