# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Tests for the CI metric regression gate."""

import json
import subprocess
import sys
from pathlib import Path

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "ci" / "regression_check.py"


def _metrics(path: Path, aggregate: dict[str, float]) -> Path:
    path.write_text(json.dumps({"run_tag": "bm", "aggregate": aggregate}), encoding="utf-8")
    return path


def _check(baseline: Path, current: Path, *extra: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, str(SCRIPT), "--baseline", str(baseline), "--current", str(current), *extra],
        capture_output=True,
        text=True,
        timeout=30,
    )


class TestRegressionCheck:
    def test_within_threshold(self, tmp_path: Path) -> None:
        baseline = _metrics(tmp_path / "base.json", {"MAP": 0.40, "P@10": 0.30})
        current = _metrics(tmp_path / "cur.json", {"MAP": 0.39, "P@10": 0.31})
        result = _check(baseline, current)
        assert result.returncode == 0
        assert "No regressions detected" in result.stdout

    def test_drop_fails(self, tmp_path: Path) -> None:
        baseline = _metrics(tmp_path / "base.json", {"MAP": 0.40})
        current = _metrics(tmp_path / "cur.json", {"MAP": 0.37})
        result = _check(baseline, current)
        assert result.returncode == 1
        assert "REGRESSION: MAP" in result.stdout

    def test_looser_threshold(self, tmp_path: Path) -> None:
        baseline = _metrics(tmp_path / "base.json", {"MAP": 0.40})
        current = _metrics(tmp_path / "cur.json", {"MAP": 0.37})
        assert _check(baseline, current, "--threshold", "0.1").returncode == 0

    def test_missing_metric(self, tmp_path: Path) -> None:
        baseline = _metrics(tmp_path / "base.json", {"MAP": 0.40, "MRR": 0.5})
        current = _metrics(tmp_path / "cur.json", {"MAP": 0.40})
        result = _check(baseline, current)
        assert result.returncode == 1
        assert "Missing metric in current results: MRR" in result.stdout

    def test_unreadable_file(self, tmp_path: Path) -> None:
        baseline = _metrics(tmp_path / "base.json", {"MAP": 0.40})
        assert _check(baseline, tmp_path / "absent.json").returncode == 1
