"""
JustTheChip: Pre-flight Validation
==================================

Input checks run BEFORE the solver. The solver itself trusts its inputs and
degrades physical-limit problems into diagnostics; malformed configuration
(non-finite numbers, inverted ranges, missing tables) is caught here instead
and reported against the offending field.

Every validator returns a ValidationReport of errors (blocking) and
warnings (advisory). ValidationReport.raise_for_errors() converts the first
error into a ConfigurationError.

validate_results() is the one check that runs AFTER the solver: it grades
how close a finished result sits to the spindle, deflection and feed limits.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field, fields
from typing import Any, List, Optional

from config import config as default_config
from config.machining_config import MachiningConfig
from .diagnostics import CuttingWarning, Severity
from .models import CalculationRequest, CalculationResult, Machine, Material, Spindle
from .tools import TaperedEndMill, Tool, VBit, ChamferMill

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Malformed input rejected before the pipeline runs."""

    def __init__(self, field_name: str, message: str):
        super().__init__(f"{field_name}: {message}")
        self.field = field_name
        self.message = message


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass
class ValidationReport:
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def error(self, field_name: str, message: str) -> None:
        self.errors.append(ValidationIssue(field_name, message))

    def warn(self, field_name: str, message: str) -> None:
        self.warnings.append(ValidationIssue(field_name, message))

    def extend(self, other: "ValidationReport") -> "ValidationReport":
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self

    def raise_for_errors(self) -> None:
        if self.errors:
            first = self.errors[0]
            logger.warning(f"Rejected configuration ({len(self.errors)} errors): {first}")
            raise ConfigurationError(first.field, first.message)

    def summary(self) -> str:
        if self.is_valid and not self.warnings:
            return "All inputs valid"
        parts = []
        if self.errors:
            parts.append(f"{len(self.errors)} error(s)")
        if self.warnings:
            parts.append(f"{len(self.warnings)} warning(s)")
        return ", ".join(parts)


def _is_number(value: Any) -> bool:
    return (isinstance(value, (int, float)) and not isinstance(value, bool)
            and math.isfinite(value))


def _positive(value: Any) -> bool:
    return _is_number(value) and value > 0


def validate_machine(machine: Optional[Machine], cfg: MachiningConfig = default_config) -> ValidationReport:
    report = ValidationReport()
    if machine is None:
        report.error("machine", "Machine configuration is required")
        return report

    feeds = machine.max_feed_mm_min
    low, high = cfg.limits.feed_mm_min
    for axis in ("x", "y", "z"):
        value = getattr(feeds, axis)
        name = f"machine.max_feed_mm_min.{axis}"
        if not _positive(value):
            report.error(name, f"{axis.upper()}-axis maximum feed rate must be positive")
        elif value < low * 100:
            report.warn(name, f"{axis.upper()}-axis feed rate seems very low for modern machines")
        elif value > high:
            report.warn(name, f"{axis.upper()}-axis feed rate seems very high - verify specifications")

    k = machine.rigidity_factor
    k_low, k_high = cfg.limits.rigidity
    if not _is_number(k) or k < 0:
        report.error("machine.rigidity_factor", "Machine rigidity factor must be non-negative")
    elif k < k_low:
        report.warn("machine.rigidity_factor", "Very low rigidity factor - expect poor surface finish")
    elif k > k_high:
        report.warn("machine.rigidity_factor", "Very high rigidity factor - verify machine specifications")

    for axis in ("radial", "axial", "feed"):
        if not _positive(getattr(machine.aggressiveness, axis)):
            report.error(f"machine.aggressiveness.{axis}",
                         f"Machine {axis} aggressiveness must be positive")
    return report


def validate_spindle(spindle: Optional[Spindle], cfg: MachiningConfig = default_config) -> ValidationReport:
    report = ValidationReport()
    if spindle is None:
        report.error("spindle", "Spindle configuration is required")
        return report

    p_low, p_high = cfg.limits.spindle_power_kw
    if not _positive(spindle.rated_power_kw):
        report.error("spindle.rated_power_kw", "Spindle power rating must be positive")
    elif spindle.rated_power_kw < p_low:
        report.warn("spindle.rated_power_kw", f"Spindle power below typical minimum ({p_low} kW)")
    elif spindle.rated_power_kw > p_high:
        report.warn("spindle.rated_power_kw", f"Spindle power above typical maximum ({p_high} kW)")

    r_low, r_high = cfg.limits.spindle_rpm
    rpm_ok = True
    if not _positive(spindle.rpm_min):
        report.error("spindle.rpm_min", "Minimum RPM must be positive")
        rpm_ok = False
    elif spindle.rpm_min < r_low:
        report.warn("spindle.rpm_min", f"Minimum RPM very low ({spindle.rpm_min})")

    if not _positive(spindle.rpm_max):
        report.error("spindle.rpm_max", "Maximum RPM must be positive")
        rpm_ok = False
    elif spindle.rpm_max > r_high:
        report.warn("spindle.rpm_max", f"Maximum RPM very high ({spindle.rpm_max})")

    if rpm_ok:
        if spindle.rpm_max <= spindle.rpm_min:
            report.error("spindle.rpm_max", "Maximum RPM must be greater than minimum RPM")
        elif not (_is_number(spindle.base_rpm)
                  and spindle.rpm_min <= spindle.base_rpm <= spindle.rpm_max):
            report.error("spindle.base_rpm", "Base RPM must be within min/max RPM range")
    return report


def validate_tool(tool: Optional[Tool], cfg: MachiningConfig = default_config) -> ValidationReport:
    report = ValidationReport()
    if tool is None:
        report.error("tool", "Tool configuration is required")
        return report

    for f in fields(tool):
        value = getattr(tool, f.name)
        if value is None or not isinstance(value, (int, float)):
            continue
        if not _is_number(value) or value < 0:
            report.error(f"tool.{f.name}", f"{f.name} must be a non-negative number")
    if report.errors:
        return report

    if isinstance(tool, (VBit, ChamferMill)) and not 0 < tool.angle_deg < 180:
        report.error("tool.angle_deg", "Included angle must be between 0 and 180 degrees")
        return report
    if isinstance(tool, TaperedEndMill) and not 0 <= tool.taper_angle_deg < 90:
        report.error("tool.taper_angle_deg", "Taper angle must be between 0 and 90 degrees")
        return report

    diameter = tool.effective_diameter(cfg)
    d_low, d_high = cfg.limits.tool_diameter_mm
    if not _positive(diameter):
        report.error("tool.diameter_mm", "Tool diameter must be positive")
        return report
    if diameter < d_low:
        report.warn("tool.diameter_mm", f"Tool diameter very small ({diameter}mm)")
    elif diameter > d_high:
        report.warn("tool.diameter_mm", f"Tool diameter very large ({diameter}mm)")

    flutes = getattr(tool, "flutes", None)
    f_low, f_high = cfg.limits.flutes
    if flutes is not None:
        if not f_low <= flutes <= f_high:
            report.error("tool.flutes", f"Number of flutes must be between {f_low} and {f_high}")
        elif flutes == 1:
            report.warn("tool.flutes", "Single-flute tools require special consideration")
        elif flutes > 8 and diameter < 6:
            report.warn("tool.flutes", "Many flutes on small diameter may cause chip evacuation issues")
    if tool.effective_flutes() < 1:
        report.error("tool.flutes", "Tool must have at least one cutting edge")

    if tool.shank_mm is not None and not _positive(tool.shank_mm):
        report.error("tool.shank_mm", "Shank diameter must be positive")

    if tool.stickout_mm is not None:
        if not _positive(tool.stickout_mm):
            report.error("tool.stickout_mm", "Tool stickout must be positive")
        else:
            ratio = tool.stickout_mm / diameter
            if ratio > cfg.limits.aspect_ratio_error:
                report.error("tool.stickout_mm",
                             f"Extreme aspect ratio ({ratio:.1f}:1) - likely to break")
            elif ratio > cfg.limits.aspect_ratio_warning:
                report.warn("tool.stickout_mm",
                            f"High aspect ratio ({ratio:.1f}:1) - expect high deflection")
    return report


def validate_material(material: Optional[Material]) -> ValidationReport:
    report = ValidationReport()
    if material is None:
        report.error("material", "Material selection is required")
        return report

    if not material.chip_load_table:
        report.error("material.chip_load_table", "Material chipload table is empty")
    for i, bucket in enumerate(material.chip_load_table):
        low, high = bucket.chip_load_range
        name = f"material.chip_load_table[{i}]"
        if not (_positive(low) and _positive(high)):
            report.error(name, "Material chipload range must be positive values")
        elif high <= low:
            report.error(name, "Maximum chipload must be greater than minimum")

    vc_low, vc_high = material.vc_range
    if not (_positive(vc_low) and _positive(vc_high)):
        report.error("material.vc_range", "Material surface speed range must be positive values")
    elif vc_high <= vc_low:
        report.error("material.vc_range", "Maximum surface speed must be greater than minimum")

    if not _positive(material.force_coefficient_kn_mm2):
        report.error("material.force_coefficient_kn_mm2", "Force coefficient must be positive")

    energy = material.specific_cutting_energy_j_mm3
    if energy is not None and not _positive(energy):
        report.error("material.specific_cutting_energy_j_mm3",
                     "Specific cutting energy must be positive")

    threshold = material.chip_thinning_below_fraction
    if threshold is not None and not _positive(threshold):
        report.error("material.chip_thinning_below_fraction",
                     "Chip thinning threshold must be positive")
    return report


def validate_cut_parameters(
    aggressiveness: float,
    user_doc_mm: Optional[float] = None,
    cfg: MachiningConfig = default_config,
) -> ValidationReport:
    report = ValidationReport()

    a_low, a_high = cfg.limits.aggressiveness
    if not _is_number(aggressiveness) or not a_low <= aggressiveness <= a_high:
        report.error("aggressiveness", f"Aggressiveness must be between {a_low} and {a_high}")
    elif aggressiveness < 0.5:
        report.warn("aggressiveness", "Very conservative aggressiveness setting")
    elif aggressiveness > 2.0:
        report.warn("aggressiveness", "Very aggressive settings - high risk of tool breakage")

    if user_doc_mm is not None:
        d_low, d_high = cfg.limits.doc_mm
        if not _positive(user_doc_mm):
            report.error("user_doc_mm", "Depth of cut must be positive")
        elif user_doc_mm < d_low:
            report.warn("user_doc_mm", f"Very shallow depth of cut ({user_doc_mm}mm)")
        elif user_doc_mm > d_high:
            report.warn("user_doc_mm", f"Very deep depth of cut ({user_doc_mm}mm)")
    return report


def validate_combination(
    request: CalculationRequest,
    catalog=None,
    cfg: MachiningConfig = default_config,
) -> ValidationReport:
    """Cross-record checks; only meaningful once each record is valid."""
    report = ValidationReport()
    diameter = request.tool.effective_diameter(cfg)

    max_speed = math.pi * diameter * request.spindle.rpm_max / 1000
    if max_speed > cfg.limits.max_surface_speed_m_min:
        report.warn("tool", "Very high surface speeds possible - ensure tool rating")

    if request.user_doc_mm is not None:
        ratio = request.user_doc_mm / diameter
        if ratio > cfg.limits.doc_ratio_error:
            report.error("user_doc_mm", "Extreme depth of cut - likely to break tool")
        elif ratio > cfg.limits.doc_ratio_warning:
            report.warn("user_doc_mm", "Deep cut relative to tool diameter - expect high forces")

    if catalog is not None:
        tool_type = request.tool.tool_type
        cut = catalog.cut_types.get(request.cut_type)
        supported = catalog.supported_cuts(tool_type)
        if (cut is not None and tool_type in catalog.tool_types
                and request.cut_type not in supported and tool_type not in cut.tool_types):
            report.error("cut_type",
                         f"Cut type {request.cut_type!r} is not supported by {tool_type}")
    return report


def validate_request(
    request: CalculationRequest,
    catalog=None,
    cfg: MachiningConfig = default_config,
) -> ValidationReport:
    """Full pre-flight check of a calculation request."""
    report = ValidationReport()
    report.extend(validate_machine(request.machine, cfg))
    report.extend(validate_spindle(request.spindle, cfg))
    report.extend(validate_tool(request.tool, cfg))
    report.extend(validate_material(request.material))
    report.extend(validate_cut_parameters(request.aggressiveness, request.user_doc_mm, cfg))

    if report.is_valid:
        report.extend(validate_combination(request, catalog, cfg))
    return report


# === RESULT CHECKS ===

@dataclass
class ResultValidation:
    """Post-calculation review of a result against spindle and machine headroom."""

    warnings: List[CuttingWarning] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        severities = {w.severity for w in self.warnings}
        if Severity.DANGER in severities:
            return "danger"
        if Severity.WARNING in severities:
            return "warning"
        return "good"


def validate_results(
    result: CalculationResult,
    machine: Optional[Machine] = None,
    cfg: MachiningConfig = default_config,
) -> ResultValidation:
    """
    Check how close a finished result runs to its limits.

    Power utilization is the balanced demand (required x scale factor) over
    available power. Feed utilization needs the machine and is skipped
    without one.
    """
    limits = cfg.limits
    check = ResultValidation()

    if result.power_available_w > 0:
        demand = result.power_required_w * result.power_scale_factor
        percent = demand / result.power_available_w * 100
        if percent > limits.result_power_warning_percent:
            check.warnings.append(CuttingWarning(
                Severity.WARNING, f"High power utilization ({percent:.1f}%)"))
            check.recommendations.append("Consider reducing feed rate or depth of cut")
        if percent > limits.result_power_danger_percent:
            check.warnings.append(CuttingWarning(
                Severity.DANGER, "Power requirement exceeds spindle capability"))
            check.recommendations.append("Reduce cutting parameters significantly")

    deflection = result.deflection_mm
    if deflection > cfg.deflection.warning_mm:
        check.warnings.append(CuttingWarning(
            Severity.WARNING, f"High tool deflection ({deflection * 1000:.1f} µm)"))
        check.recommendations.append("Use shorter or larger diameter tool")
    if deflection > cfg.deflection.danger_mm:
        check.warnings.append(CuttingWarning(
            Severity.DANGER, "Excessive tool deflection - poor surface finish expected"))
        check.recommendations.append("Significantly reduce cutting forces")

    if machine is not None:
        utilization = result.feed_mm_min / machine.max_feed_mm_min.ceiling
        if utilization > limits.result_feed_warning_fraction:
            check.warnings.append(CuttingWarning(
                Severity.WARNING, f"High feed rate utilization ({utilization * 100:.1f}%)"))

    if check.warnings:
        logger.debug(f"Result check for {result.material_key}/{result.cut_type}: {check.status}")
    return check
