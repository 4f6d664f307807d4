"""Pre-flight validation of machines, spindles, tools, materials and requests."""

import math
import sys
from dataclasses import replace
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

import pytest  # noqa: E402


def _catalog():
    from core.catalog import load_default_catalog

    return load_default_catalog()


def _fields(issues):
    return [issue.field for issue in issues]


class TestCatalogPresetsAreValid:
    def test_bundled_presets_pass(self):
        from core.validation import validate_machine, validate_material, validate_spindle

        catalog = _catalog()
        for machine in catalog.machines.values():
            assert validate_machine(machine).is_valid, machine.name
        for spindle in catalog.spindles.values():
            assert validate_spindle(spindle).is_valid, spindle.name
        for material in catalog.materials.values():
            assert validate_material(material).is_valid, material.name


class TestSpindleValidation:
    def test_inverted_rpm_range(self):
        from core.validation import validate_spindle

        spindle = replace(_catalog().spindle("water_2_2kw"), rpm_min=24000, rpm_max=6000)
        report = validate_spindle(spindle)
        assert "spindle.rpm_max" in _fields(report.errors)

    def test_base_rpm_outside_range(self):
        from core.validation import validate_spindle

        spindle = replace(_catalog().spindle("water_2_2kw"), base_rpm=30000)
        assert _fields(validate_spindle(spindle).errors) == ["spindle.base_rpm"]

    def test_non_finite_power(self):
        from core.validation import validate_spindle

        spindle = replace(_catalog().spindle("water_2_2kw"), rated_power_kw=math.nan)
        assert "spindle.rated_power_kw" in _fields(validate_spindle(spindle).errors)

    def test_low_minimum_rpm_is_a_warning(self):
        from core.validation import validate_spindle

        spindle = replace(_catalog().spindle("manual_r8"), rpm_min=50)
        report = validate_spindle(spindle)
        assert report.is_valid
        assert "spindle.rpm_min" in _fields(report.warnings)


class TestMachineValidation:
    def test_negative_rigidity(self):
        from core.validation import validate_machine

        machine = replace(_catalog().machine("printnc"), rigidity_factor=-1.0)
        assert "machine.rigidity_factor" in _fields(validate_machine(machine).errors)

    def test_low_rigidity_warns(self):
        from core.validation import validate_machine

        machine = replace(_catalog().machine("printnc"), rigidity_factor=0.3)
        report = validate_machine(machine)
        assert report.is_valid
        assert _fields(report.warnings) == ["machine.rigidity_factor"]

    def test_zero_axis_feed(self):
        from core.models import AxisFeedLimits
        from core.validation import validate_machine

        machine = replace(_catalog().machine("printnc"),
                          max_feed_mm_min=AxisFeedLimits(x=6000, y=6000, z=0))
        assert _fields(validate_machine(machine).errors) == ["machine.max_feed_mm_min.z"]


class TestToolValidation:
    def test_valid_tool(self):
        from core.tools import FlatEndMill
        from core.validation import validate_tool

        report = validate_tool(FlatEndMill(diameter_mm=6, flutes=3, stickout_mm=20))
        assert report.is_valid
        assert report.warnings == []

    def test_negative_diameter(self):
        from core.tools import FlatEndMill
        from core.validation import validate_tool

        assert "tool.diameter_mm" in _fields(validate_tool(FlatEndMill(diameter_mm=-1)).errors)

    def test_flute_count_limits(self):
        from core.tools import FlatEndMill
        from core.validation import validate_tool

        assert "tool.flutes" in _fields(validate_tool(FlatEndMill(diameter_mm=6, flutes=0)).errors)
        assert "tool.flutes" in _fields(validate_tool(FlatEndMill(diameter_mm=6, flutes=24)).errors)
        single = validate_tool(FlatEndMill(diameter_mm=6, flutes=1))
        assert single.is_valid and "tool.flutes" in _fields(single.warnings)

    def test_slitting_saw_teeth_are_not_flutes(self):
        from core.tools import SlittingSaw
        from core.validation import validate_tool

        assert validate_tool(SlittingSaw(diameter_mm=63, teeth=72)).is_valid

    @pytest.mark.parametrize(
        "stickout, valid, warned",
        [(30.0, True, False), (42.0, True, True), (66.0, False, False), (0.0, False, False)],
    )
    def test_aspect_ratio(self, stickout, valid, warned):
        from core.tools import FlatEndMill
        from core.validation import validate_tool

        report = validate_tool(FlatEndMill(diameter_mm=6, stickout_mm=stickout))
        assert report.is_valid is valid
        assert ("tool.stickout_mm" in _fields(report.warnings)) is warned

    def test_vbit_angle_range(self):
        from core.tools import VBit
        from core.validation import validate_tool

        assert not validate_tool(VBit(angle_deg=180)).is_valid
        assert validate_tool(VBit(angle_deg=60)).is_valid


class TestMaterialValidation:
    def test_inverted_chip_load_bucket(self):
        from core.models import ChipLoadBucket
        from core.validation import validate_material

        material = replace(
            _catalog().material("al_6061_t6"),
            chip_load_table=(ChipLoadBucket(6, (0.05, 0.02)),),
        )
        assert _fields(validate_material(material).errors) == ["material.chip_load_table[0]"]

    def test_zero_surface_speed(self):
        from core.validation import validate_material

        material = replace(_catalog().material("al_6061_t6"), vc_range=(0.0, 100.0))
        assert "material.vc_range" in _fields(validate_material(material).errors)

    def test_empty_table(self):
        from core.validation import validate_material

        material = replace(_catalog().material("al_6061_t6"), chip_load_table=())
        assert not validate_material(material).is_valid


class TestCutParameters:
    @pytest.mark.parametrize("aggressiveness", [0.05, 3.5, math.inf])
    def test_aggressiveness_out_of_range(self, aggressiveness):
        from core.validation import validate_cut_parameters

        assert _fields(validate_cut_parameters(aggressiveness).errors) == ["aggressiveness"]

    def test_aggressiveness_edges_warn(self):
        from core.validation import validate_cut_parameters

        assert _fields(validate_cut_parameters(0.3).warnings) == ["aggressiveness"]
        assert _fields(validate_cut_parameters(2.5).warnings) == ["aggressiveness"]
        assert validate_cut_parameters(1.0).warnings == []

    def test_user_doc_must_be_positive(self):
        from core.validation import validate_cut_parameters

        assert _fields(validate_cut_parameters(1.0, 0.0).errors) == ["user_doc_mm"]
        assert _fields(validate_cut_parameters(1.0, 30.0).warnings) == ["user_doc_mm"]


class TestRequestValidation:
    def _request(self, tool=None, cut_type="profile", user_doc_mm=None, spindle="water_2_2kw"):
        from core.solver import build_request
        from core.tools import FlatEndMill

        return build_request(
            _catalog(), "printnc", spindle, tool or FlatEndMill(diameter_mm=6),
            "al_6061_t6", cut_type, user_doc_mm=user_doc_mm,
        )

    def test_valid_request(self):
        from core.validation import validate_request

        report = validate_request(self._request(), _catalog())
        assert report.is_valid
        assert report.summary() == "All inputs valid"

    def test_doc_ratio_warning_and_error(self):
        from core.validation import validate_request

        warned = validate_request(self._request(user_doc_mm=15.0))
        assert warned.is_valid and "user_doc_mm" in _fields(warned.warnings)

        rejected = validate_request(self._request(user_doc_mm=20.0))
        assert _fields(rejected.errors) == ["user_doc_mm"]

    def test_high_surface_speed_warning(self):
        """pi x 20 x 24000 / 1000 = 1508 m/min."""
        from core.tools import FlatEndMill
        from core.validation import validate_request

        report = validate_request(self._request(tool=FlatEndMill(diameter_mm=20)))
        assert "tool" in _fields(report.warnings)

    def test_unsupported_cut_for_tool(self):
        from core.validation import validate_request

        catalog = _catalog()
        report = validate_request(self._request(cut_type="drilling"), catalog)
        assert _fields(report.errors) == ["cut_type"]

    def test_unknown_cut_is_not_rejected(self):
        from core.validation import validate_request

        assert validate_request(self._request(cut_type="mystery"), _catalog()).is_valid

    def test_raise_for_errors_carries_field(self):
        from core.validation import ConfigurationError, validate_request

        report = validate_request(self._request(user_doc_mm=20.0))
        with pytest.raises(ConfigurationError) as excinfo:
            report.raise_for_errors()

        assert isinstance(excinfo.value, ValueError)
        assert excinfo.value.field == "user_doc_mm"


class TestResultValidation:
    """
    Base result on printnc (slowest axis 2000 mm/min), rescaled per case:
        power 1000 W of 1870 W available         -> 53.5%, quiet
        power 1600 W                              -> 85.6%, warning
        power 1800 W                              -> 96.3%, warning + danger
        deflection 0.03 mm                        -> warning
        deflection 0.06 mm                        -> warning + danger
        feed 1700 mm/min / 2000                   -> 85%, warning
    """

    def _result(self, power_w=1000.0, deflection_mm=0.01, feed_mm_min=1000.0):
        from core.models import CalculationResult, DeflectionBreakdown

        return CalculationResult(
            rpm=18000, feed_mm_min=feed_mm_min, chip_load_mm=0.02,
            chip_load_nominal_mm=0.02, ae_mm=1.8, ap_mm=6.0, mrr_mm3_min=10800,
            power_required_w=power_w, power_available_w=1870.0, power_scale_factor=1.0,
            cutting_force_n=20.0, deflection=DeflectionBreakdown(bending_mm=deflection_mm),
            surface_speed_m_min=339.3, sfm=1113.2, effective_diameter_mm=6.0,
            effective_flutes=3, tool_type="endmill_flat", material_key="al_6061_t6",
            cut_type="profile", user_doc_override=False,
        )

    def test_comfortable_result_is_good(self):
        from core.validation import validate_results

        check = validate_results(self._result(), _catalog().machine("printnc"))
        assert check.warnings == []
        assert check.status == "good"

    def test_power_utilization_bands(self):
        from core.diagnostics import Severity
        from core.validation import validate_results

        warned = validate_results(self._result(power_w=1600.0))
        assert warned.status == "warning"
        assert warned.warnings[0].message == "High power utilization (85.6%)"

        overloaded = validate_results(self._result(power_w=1800.0))
        assert overloaded.status == "danger"
        assert [w.severity for w in overloaded.warnings] == [Severity.WARNING, Severity.DANGER]
        assert "Reduce cutting parameters significantly" in overloaded.recommendations

    def test_balanced_demand_is_used(self):
        from dataclasses import replace

        from core.validation import validate_results

        result = replace(self._result(power_w=4000.0), power_scale_factor=0.3)
        assert validate_results(result).status == "good"

    def test_deflection_bands(self):
        from core.validation import validate_results

        warned = validate_results(self._result(deflection_mm=0.03))
        assert [w.message for w in warned.warnings] == ["High tool deflection (30.0 µm)"]

        excessive = validate_results(self._result(deflection_mm=0.06))
        assert excessive.status == "danger"
        assert "Use shorter or larger diameter tool" in excessive.recommendations

    def test_feed_utilization_needs_machine(self):
        from core.validation import validate_results

        result = self._result(feed_mm_min=1700.0)
        assert validate_results(result).warnings == []

        check = validate_results(result, _catalog().machine("printnc"))
        assert [w.message for w in check.warnings] == ["High feed rate utilization (85.0%)"]
