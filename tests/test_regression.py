import json
from pathlib import Path
import sys

# Ensure repository root on path for direct test execution
REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from core.regression import RegressionRunner  # noqa: E402


def test_formula_regressions_within_ranges(tmp_path):
    runner = RegressionRunner()
    passed, current, failures = runner.check(report_dir=tmp_path)

    assert passed, f"Formula regression failures: {failures}"
    # Spot check metrics are captured
    assert "aluminum_6061_6mm_carbide" in current
    assert "deflection_mm" in current["stainless_304_3mm_carbide"]

    report = json.loads((tmp_path / "formula_validation_report.json").read_text())
    assert report["status"] == "pass"


def test_aluminum_reference_values():
    """
    MRR = 1.5 x 3 x 600 = 2700; P = 2700 x 0.7 / 60 / 0.8 = 39.375 W
    fz = 600 / (8000 x 2) = 0.0375; F = 0.7 x 1.5 x 0.0375 x 1000 = 39.375 N
    """
    runner = RegressionRunner()
    result = runner.evaluate(runner.cases[0])

    assert abs(result.metrics["power_w"] - 39.375) < 1e-9
    assert abs(result.metrics["force_n"] - 39.375) < 1e-9
    assert result.passed


def test_out_of_range_case_reports_failure():
    from dataclasses import replace

    from core.regression import REFERENCE_CASES

    broken = replace(REFERENCE_CASES[0], expected={"power_w": (100.0, 200.0)})
    passed, _, failures = RegressionRunner(cases=[broken]).check()

    assert not passed
    assert failures[0].startswith("aluminum_6061_6mm_carbide:power_w")
