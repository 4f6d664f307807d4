"""
Solver Scenarios
================

End-to-end runs of the pipeline against the bundled catalog and a small
synthetic one:

  A. RPM clamp at the spindle maximum (titanium, 0.3 mm cutter, adaptive, x2.0)
  B. Chip thinning at ae = 2 mm on a 6 mm cutter
  C. Power limiting scales feed, chip load and MRR by one ratio
  D. Deflection danger reported with three decimals
"""

import json
import math
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

import pytest  # noqa: E402

SYNTHETIC_CATALOG = {
    "tool_types": {
        "endmill_flat": {
            "name": "Flat End Mill",
            "supported_cuts": ["side", "slot"],
            "speed_factors": {"side": 1.0, "slot": 1.0},
        },
    },
    "cut_types": {
        "side": {"name": "Side", "ae_fraction": 1 / 3, "ap_fraction_range": [0.5, 0.5],
                 "tool_types": ["endmill_flat"]},
        "slot": {"name": "Slot", "ae_fraction": 1.0, "ap_fraction_range": [1.0, 1.0],
                 "tool_types": ["endmill_flat"]},
    },
    "materials": {
        "testium": {
            "name": "Testium", "category": "metal", "vc_range": [140, 160],
            "fz_by_diameter": [{"max_d_mm": 10, "range": [0.02, 0.04]}],
            "max_radial_engagement_fraction": {"side": 1.0, "slot": 1.0},
            "max_axial_per_pass_d": {"side": 2.0, "slot": 1.0},
            "chip_thinning_below_fraction": 0.5,
            "force_coeff_kn_mm2": 1.0,
            "specific_cutting_energy_j_mm3": 1.0,
        },
        "hardium": {
            "name": "Hardium", "category": "metal", "vc_range": [140, 160],
            "fz_by_diameter": [{"max_d_mm": 10, "range": [0.02, 0.04]}],
            "max_radial_engagement_fraction": {"side": 1.0, "slot": 1.0},
            "max_axial_per_pass_d": {"side": 2.0, "slot": 1.0},
            "force_coeff_kn_mm2": 1.0,
            "specific_cutting_energy_j_mm3": 50.0,
        },
    },
    "spindles": {
        "test": {"name": "Test Spindle", "rated_power_kw": 2.2,
                 "rpm_min": 6000, "rpm_max": 24000, "base_rpm": 12000},
    },
    "machines": {
        "test": {"name": "Test Machine", "rigidity_factor": 1.0,
                 "max_feed_mm_min": {"x": 10000, "y": 10000, "z": 10000}},
    },
}


def _synthetic_solver():
    from core.catalog import Catalog
    from core.solver import SpeedsFeedsSolver

    return SpeedsFeedsSolver(Catalog.from_mapping(SYNTHETIC_CATALOG))


def _synthetic_request(material_key, cut_type, tool=None, **kwargs):
    from core.solver import build_request
    from core.tools import FlatEndMill

    solver = _synthetic_solver()
    tool = tool or FlatEndMill(diameter_mm=6, flutes=2)
    request = build_request(solver.catalog, "test", "test", tool, material_key, cut_type, **kwargs)
    return solver, request


class TestScenarioA:
    def test_rpm_maximum_clamp(self):
        from core.catalog import load_default_catalog
        from core.diagnostics import Severity
        from core.solver import SpeedsFeedsSolver, build_request
        from core.tools import FlatEndMill

        catalog = load_default_catalog()
        request = build_request(
            catalog, "printnc", "water_2_2kw", FlatEndMill(diameter_mm=0.3),
            "titanium", "adaptive", aggressiveness=2.0,
        )
        result = SpeedsFeedsSolver(catalog).calculate(request)

        assert result.rpm == 24000
        assert result.surface_speed_m_min == pytest.approx(math.pi * 0.3 * 24000 / 1000)
        warnings = [(w.severity, w.message) for w in result.warnings]
        assert (Severity.WARNING, "RPM limited by spindle maximum") in warnings


class TestScenarioB:
    def test_chip_thinning_activation(self):
        """fz mid 0.03; ae = 6/3 = 2 mm < 3 mm -> x sqrt(3)."""
        from core.diagnostics import Severity

        solver, request = _synthetic_request("testium", "side")
        result = solver.calculate(request)

        assert result.ae_mm == pytest.approx(2.0)
        ratio = result.chip_load_nominal_mm / 0.03
        assert abs(ratio - math.sqrt(3)) / math.sqrt(3) < 1e-9, (
            f"Chip thinning ratio {ratio:.5f}, expected {math.sqrt(3):.5f}"
        )
        infos = [w.message for w in result.warnings if w.severity == Severity.INFO]
        assert "Chip thinning compensation applied" in infos


class TestScenarioC:
    def test_power_limiting_single_ratio(self):
        """
        Hardium slot, 6 x 6 mm, E = 50 J/mm^3:
            vf = n x 2 x 0.03, MRR = 36 vf
            P_req = MRR x 50 / 60 x 1.15 >> 0.9 P_avail
        """
        solver, request = _synthetic_request("hardium", "slot")
        result = solver.calculate(request)

        scale = result.power_scale_factor
        unscaled_feed = result.rpm * 2 * 0.03
        expected_scale = 0.85 * result.power_available_w / result.power_required_w

        assert 0 < scale < 1
        assert scale == pytest.approx(expected_scale)
        assert result.feed_mm_min == pytest.approx(unscaled_feed * scale)
        assert result.chip_load_mm == pytest.approx(0.03 * scale)
        assert result.mrr_mm3_min == pytest.approx(6 * 6 * unscaled_feed * scale)
        assert result.power_required_w * scale <= result.power_available_w * 0.85 * (1 + 1e-12)
        assert "Power limited" in [w.message for w in result.warnings]

    def test_no_limiting_leaves_scale_at_one(self):
        solver, request = _synthetic_request("testium", "side")
        result = solver.calculate(request)

        assert result.power_scale_factor == 1.0
        assert "Power limited" not in [w.message for w in result.warnings]


class TestScenarioD:
    def test_deflection_danger_from_model(self):
        """Carbide, 3 mm shank, 40 mm stickout, 80 N -> ~0.8 mm total."""
        from core.deflection import DeflectionModel
        from core.diagnostics import DiagnosticLog, Severity, check_deflection
        from core.tools import FlatEndMill

        tool = FlatEndMill(diameter_mm=3, shank_mm=3, stickout_mm=40)
        total = DeflectionModel().analyze(tool, 80.0).total_mm
        log = DiagnosticLog()
        check_deflection(total, log)

        assert total > 0.05
        assert log.messages(Severity.DANGER) == [f"High deflection: {total:.3f}mm"]

    def test_solver_reports_deflection_value(self):
        from core.diagnostics import Severity
        from core.tools import FlatEndMill

        tool = FlatEndMill(diameter_mm=3, shank_mm=3, stickout_mm=40)
        solver, request = _synthetic_request("testium", "slot", tool=tool)
        result = solver.calculate(request)

        dangers = [w.message for w in result.warnings if w.severity == Severity.DANGER]
        assert result.deflection_mm > 0.05
        assert f"High deflection: {result.deflection_mm:.3f}mm" in dangers


class TestResultProperties:
    def test_json_round_trip_is_exact(self):
        from core.models import CalculationResult

        solver, request = _synthetic_request("testium", "side", user_doc_mm=2.5)
        result = solver.calculate(request)
        restored = CalculationResult.from_dict(json.loads(json.dumps(result.to_dict())))

        assert restored == result
        assert restored.deflection.total_mm == result.deflection.total_mm

    def test_calculation_is_deterministic(self):
        solver, request = _synthetic_request("hardium", "slot")
        assert solver.calculate(request) == solver.calculate(request)

    def test_warning_order_follows_pipeline(self):
        """User DOC warning (engagement) precedes the RPM clamp (speed)."""
        from core.catalog import load_default_catalog
        from core.solver import SpeedsFeedsSolver, build_request
        from core.tools import FlatEndMill

        catalog = load_default_catalog()
        request = build_request(
            catalog, "printnc", "water_2_2kw", FlatEndMill(diameter_mm=0.3),
            "titanium", "adaptive", aggressiveness=2.0, user_doc_mm=1.0,
        )
        messages = [w.message for w in SpeedsFeedsSolver(catalog).calculate(request).warnings]

        doc = next(i for i, m in enumerate(messages) if m.startswith("User DOC"))
        rpm = messages.index("RPM limited by spindle maximum")
        assert doc < rpm


class TestMatrixAndValidation:
    def _matrix(self, max_workers=None):
        from core.catalog import load_default_catalog
        from core.solver import SpeedsFeedsSolver
        from core.tools import FlatEndMill

        catalog = load_default_catalog()
        solver = SpeedsFeedsSolver(catalog)
        return solver.calculate_matrix(
            catalog.machine("printnc"), catalog.spindle("water_2_2kw"),
            FlatEndMill(diameter_mm=6, flutes=3, stickout_mm=20),
            ["al_6061_t6", "unobtainium", "steel_1018"],
            ["profile", "vcarve"],
            max_workers=max_workers,
        )

    def test_matrix_cells_in_input_order(self):
        entries = self._matrix()

        assert [(e.material_key, e.cut_type) for e in entries] == [
            ("al_6061_t6", "profile"), ("al_6061_t6", "vcarve"),
            ("unobtainium", "profile"), ("unobtainium", "vcarve"),
            ("steel_1018", "profile"), ("steel_1018", "vcarve"),
        ]
        assert entries[0].ok and entries[4].ok
        assert entries[2].errors == ["Unknown material: 'unobtainium'"]
        assert not entries[1].ok
        assert "not supported" in entries[1].errors[0]

    def test_thread_pool_matches_sequential(self):
        sequential = self._matrix()
        threaded = self._matrix(max_workers=4)

        assert [e.result for e in sequential] == [e.result for e in threaded]

    def test_checked_calculation_rejects_bad_aggressiveness(self):
        from core.validation import ConfigurationError

        solver, request = _synthetic_request("testium", "side", aggressiveness=5.0)
        with pytest.raises(ConfigurationError) as excinfo:
            solver.calculate_checked(request)
        assert excinfo.value.field == "aggressiveness"

    def test_unknown_preset_raises_catalog_error(self):
        from core.catalog import CatalogError
        from core.tools import FlatEndMill

        from core.solver import build_request

        catalog = _synthetic_solver().catalog
        with pytest.raises(CatalogError) as excinfo:
            build_request(catalog, "nope", "test", FlatEndMill(diameter_mm=6), "testium", "side")
        assert str(excinfo.value) == "Unknown machine: 'nope'"

    def test_matrix_accepts_one_shot_iterables(self):
        from core.catalog import load_default_catalog
        from core.solver import SpeedsFeedsSolver
        from core.tools import FlatEndMill

        catalog = load_default_catalog()
        entries = SpeedsFeedsSolver(catalog).calculate_matrix(
            catalog.machine("printnc"), catalog.spindle("water_2_2kw"),
            FlatEndMill(diameter_mm=6, flutes=3, stickout_mm=20),
            iter(["al_6061_t6", "steel_1018"]),
            (cut for cut in ["profile", "slot"]),
        )

        assert [(e.material_key, e.cut_type) for e in entries] == [
            ("al_6061_t6", "profile"), ("al_6061_t6", "slot"),
            ("steel_1018", "profile"), ("steel_1018", "slot"),
        ]
        assert all(e.ok for e in entries)
