"""Formula regression cases checked against handbook ranges."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from config import config as default_config
from config.machining_config import MachiningConfig, ToolMaterial
from .deflection import DeflectionModel, cutting_force_n
from .models import ChipLoadBucket, Material
from .power import net_cutting_power_w
from .tools import FlatEndMill

ASSUMED_RPM = 8000.0
ASSUMED_TOOL_EFFICIENCY = 0.8


@dataclass(frozen=True)
class ReferenceCase:
    """Known cut with the accepted range for each computed metric."""

    name: str
    force_coefficient_kn_mm2: float
    specific_energy_j_mm3: float
    tool: FlatEndMill
    ae_mm: float
    ap_mm: float
    feed_mm_min: float
    expected: Dict[str, Tuple[float, float]]

    def material(self) -> Material:
        return Material(
            key=self.name,
            name=self.name,
            category="metal",
            vc_range=(1.0, 1.0),
            chip_load_table=(ChipLoadBucket(float("inf"), (0.01, 0.1)),),
            force_coefficient_kn_mm2=self.force_coefficient_kn_mm2,
            specific_cutting_energy_j_mm3=self.specific_energy_j_mm3,
        )


@dataclass
class ScenarioResult:
    name: str
    metrics: Dict[str, float]
    failures: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.failures


REFERENCE_CASES: List[ReferenceCase] = [
    ReferenceCase(
        name="aluminum_6061_6mm_carbide",
        force_coefficient_kn_mm2=0.7,
        specific_energy_j_mm3=0.7,
        tool=FlatEndMill(diameter_mm=6, flutes=2, stickout_mm=20,
                         material=ToolMaterial.CARBIDE),
        ae_mm=1.5, ap_mm=3.0, feed_mm_min=600,
        expected={
            "power_w": (30.0, 50.0),
            "force_n": (30.0, 50.0),
            "deflection_mm": (0.020, 0.060),
        },
    ),
    ReferenceCase(
        name="stainless_304_3mm_carbide",
        force_coefficient_kn_mm2=2.0,
        specific_energy_j_mm3=4.2,
        tool=FlatEndMill(diameter_mm=3, flutes=2, stickout_mm=15,
                         material=ToolMaterial.CARBIDE),
        ae_mm=0.3, ap_mm=1.0, feed_mm_min=150,
        expected={
            "power_w": (3.0, 8.0),
            "force_n": (4.0, 8.0),
            "deflection_mm": (0.005, 0.015),
        },
    ),
    ReferenceCase(
        name="titanium_6al4v_12mm_carbide",
        force_coefficient_kn_mm2=2.5,
        specific_energy_j_mm3=5.5,
        tool=FlatEndMill(diameter_mm=12, flutes=4, stickout_mm=30,
                         material=ToolMaterial.CARBIDE),
        ae_mm=1.2, ap_mm=0.5, feed_mm_min=120,
        expected={
            "power_w": (6.0, 15.0),
            "force_n": (8.0, 15.0),
            "deflection_mm": (0.008, 0.015),
        },
    ),
]


class RegressionRunner:
    """Run the reference formula cases for CI validation."""

    def __init__(
        self,
        cases: Optional[Iterable[ReferenceCase]] = None,
        cfg: MachiningConfig = default_config,
    ):
        self.cases = list(cases) if cases is not None else list(REFERENCE_CASES)
        self.deflection = DeflectionModel(cfg)

    def evaluate(self, case: ReferenceCase) -> ScenarioResult:
        mrr = case.ae_mm * case.ap_mm * case.feed_mm_min
        power = net_cutting_power_w(
            mrr, case.specific_energy_j_mm3, efficiency=ASSUMED_TOOL_EFFICIENCY
        )

        # Chip load implied by the feed at the assumed spindle speed
        chip_load = case.feed_mm_min / (ASSUMED_RPM * case.tool.effective_flutes())
        force = cutting_force_n(case.tool, case.material(), case.ae_mm, chip_load)
        deflection = self.deflection.analyze(case.tool, force).total_mm

        metrics = {"power_w": power, "force_n": force, "deflection_mm": deflection}
        failures = []
        for metric, (low, high) in case.expected.items():
            value = metrics[metric]
            if not low <= value <= high:
                failures.append(
                    f"{case.name}:{metric} = {value:.4f} outside expected {low}-{high}"
                )
        return ScenarioResult(name=case.name, metrics=metrics, failures=failures)

    def run(self) -> List[ScenarioResult]:
        """Execute all reference cases."""
        return [self.evaluate(case) for case in self.cases]

    def to_serializable(
        self, results: Iterable[ScenarioResult]
    ) -> Dict[str, Dict[str, float]]:
        return {res.name: res.metrics for res in results}

    def check(
        self, report_dir: Optional[Path] = None
    ) -> Tuple[bool, Dict[str, Dict[str, float]], List[str]]:
        """Run all cases; optionally write a JSON report."""
        results = self.run()
        current = self.to_serializable(results)
        failures = [f for res in results for f in res.failures]

        if report_dir is not None:
            report_dir = Path(report_dir)
            report_dir.mkdir(parents=True, exist_ok=True)
            report = {
                "cases": {
                    case.name: {"expected": case.expected, "current": current[case.name]}
                    for case in self.cases
                },
                "failures": failures,
                "status": "fail" if failures else "pass",
            }
            with open(report_dir / "formula_validation_report.json", "w", encoding="utf-8") as f:
                json.dump(report, f, indent=2)

        return (len(failures) == 0, current, failures)
