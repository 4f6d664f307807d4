"""
JustTheChip: Single Source of Truth (SSOT)
==========================================

This configuration file defines ALL solver constants for the cutting-parameter
pipeline. NEVER hard-code thresholds elsewhere. Engagement, speed, power,
deflection and diagnostics stages read these values (or an override passed in
by the caller).

Units: millimetres, minutes, watts, newtons and MPa unless noted.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Tuple


class ToolMaterial(Enum):
    """Cutter substrate; selects Young's modulus and yield strength."""
    CARBIDE = "carbide"
    HSS = "hss"
    CERMET = "cermet"
    CERAMIC = "ceramic"
    DIAMOND = "diamond"
    CBN = "cbn"


class Coating(Enum):
    """Cutter coating; affects cutting efficiency in the power report."""
    UNCOATED = "uncoated"
    TIN = "tin"
    TICN = "ticn"
    TIALN = "tialn"
    ALCRN = "alcrn"
    DIAMOND_LIKE = "diamond_like"


class HolderType(Enum):
    """Tool holding method; selects holder compliance."""
    COLLET = "collet"
    SHRINK_FIT = "shrink_fit"
    HYDRAULIC = "hydraulic"
    POOR_SETUP = "poor_setup"


@dataclass
class SpeedParams:
    """Surface speed resolution."""

    # Fallback when the tool type has no factor for the cut
    cut_speed_factors: Dict[str, float] = field(default_factory=lambda: {
        "slot": 1.0,
        "profile": 1.2,
        "adaptive": 1.3,
        "facing": 1.1,
        "drilling": 0.8,
        "boring": 0.9,
    })
    default_speed_factor: float = 1.0
    sfm_per_m_min: float = 3.28084        # ft per metre


@dataclass
class EngagementParams:
    """Radial/axial engagement heuristics."""

    drill_axial_fraction: float = 0.5     # ap = 0.5 D for drills
    vbit_depth_allowance_mm: float = 2.0  # Assumed V-bit depth beyond the tip
    default_fraction: float = 1.0         # Missing table data = full engagement
    full_width_cuts: Tuple[str, ...] = ("slot",)


@dataclass
class PowerParams:
    """Spindle power curve and power balancing."""

    spindle_efficiency: float = 0.85      # Applied to the available curve
    torque_ramp_factor: float = 1.5       # Torque ratio saturates at 1.5 x rpm_min
    spindle_loss_surcharge: float = 1.15  # +15% on required cutting power
    limit_trigger_fraction: float = 0.9   # Balance when required > 90% available
    limit_target_fraction: float = 0.85   # Scale down to 85% of available

    # Fallback specific cutting energy (J/mm^3) by material category
    category_specific_energy: Dict[str, float] = field(default_factory=lambda: {
        "metal": 2.5,
        "plastic": 0.2,
        "wood": 0.05,
    })
    default_specific_energy: float = 1.0

    # === POWER REPORT (supplemental analysis) ===
    drive_efficiency: float = 0.9
    base_loss_fraction: float = 0.05      # Bearing/windage losses, % of rated
    rpm_loss_fraction: float = 0.3
    rpm_loss_exponent: float = 1.5
    utilization_warning_percent: float = 80.0
    utilization_danger_percent: float = 95.0

    coating_efficiency: Dict[Coating, float] = field(default_factory=lambda: {
        Coating.UNCOATED: 0.75,
        Coating.TIN: 0.82,
        Coating.TICN: 0.83,
        Coating.ALCRN: 0.84,
        Coating.TIALN: 0.85,
        Coating.DIAMOND_LIKE: 0.87,
    })
    tool_efficiency_penalty: Dict[str, float] = field(default_factory=lambda: {
        "endmill_ball": 0.9,
        "vbit": 0.85,
    })
    report_tool_factors: Dict[str, float] = field(default_factory=lambda: {
        "endmill_flat": 1.0,
        "endmill_ball": 1.1,
        "chamfer": 0.9,
        "vbit": 0.8,
        "facemill": 1.3,
        "drill": 0.7,
        "threadmill": 0.6,
        "tapered": 1.05,
        "boring": 0.8,
        "slitting": 1.4,
    })
    report_cut_factors: Dict[str, float] = field(default_factory=lambda: {
        "slot": 1.2,
        "profile": 1.0,
        "adaptive": 0.8,
        "facing": 1.1,
        "plunge": 1.5,
        "drilling": 1.0,
        "chamfer": 0.9,
        "vcarve": 0.7,
    })
    cut_torque_factors: Dict[str, float] = field(default_factory=lambda: {
        "slot": 1.2,
        "profile": 1.0,
        "adaptive": 0.9,
        "facing": 1.1,
        "plunge": 1.4,
        "drilling": 1.3,
    })

    # === THERMAL (supplemental analysis) ===
    heat_fraction: float = 0.85           # Share of cutting power turned into heat
    tool_heat_fraction: float = 0.2       # Share of that heat entering the tool
    coolant_heat_factor: float = 0.3      # Tool heat multiplier with coolant
    tool_thermal_capacity_w_mm2: float = 0.5
    coolant_recommend_fraction: float = 0.6
    default_thermal_conductivity: float = 50.0  # W/m.K


@dataclass
class DeflectionParams:
    """Cantilever tool model constants."""

    default_stickout_mm: float = 20.0
    shear_modulus_ratio: float = 2.6      # G = E / 2.6
    shear_shape_factor: float = 1.2

    youngs_modulus_mpa: Dict[ToolMaterial, float] = field(default_factory=lambda: {
        ToolMaterial.CARBIDE: 600000.0,
        ToolMaterial.HSS: 210000.0,
        ToolMaterial.CERMET: 450000.0,
        ToolMaterial.CERAMIC: 380000.0,
        ToolMaterial.DIAMOND: 1000000.0,
        ToolMaterial.CBN: 700000.0,
    })
    yield_strength_mpa: Dict[ToolMaterial, float] = field(default_factory=lambda: {
        ToolMaterial.CARBIDE: 3000.0,
        ToolMaterial.HSS: 2000.0,
        ToolMaterial.CERMET: 2500.0,
        ToolMaterial.CERAMIC: 1500.0,
        ToolMaterial.DIAMOND: 5000.0,
        ToolMaterial.CBN: 4000.0,
    })
    # mm/N
    holder_compliance: Dict[HolderType, float] = field(default_factory=lambda: {
        HolderType.COLLET: 0.001,
        HolderType.SHRINK_FIT: 0.0005,
        HolderType.HYDRAULIC: 0.0003,
        HolderType.POOR_SETUP: 0.005,
    })

    warning_mm: float = 0.02
    danger_mm: float = 0.05

    # Quality grading for analyze_deflection()
    finish_limit_mm: float = 0.005
    semi_finish_limit_mm: float = 0.02
    rough_limit_mm: float = 0.05

    # Stickout optimizer
    candidate_diameters_mm: Tuple[float, ...] = (3, 4, 5, 6, 8, 10, 12, 16, 20)
    min_practical_stickout_mm: float = 10.0
    max_stickout_mm: float = 50.0
    max_recommendations: int = 5


@dataclass
class DiagnosticParams:
    """Advisory thresholds for the diagnostics aggregator."""

    rubbing_fraction: float = 0.5         # fz below 0.5 x table minimum
    overload_fraction: float = 1.5        # fz above 1.5 x table maximum
    rubbing_exempt_tools: Tuple[str, ...] = ("drill", "boring")

    deep_vcarve_fraction: float = 0.5     # ap > 0.5 D
    slitting_feed_limit: float = 500.0    # mm/min
    boring_force_limit: float = 100.0     # N
    small_tool_diameter: float = 1.0      # mm
    small_tool_force_limit: float = 10.0  # N
    deep_doc_multiple: float = 2.0        # user DOC > 2 D


@dataclass
class ValidationLimits:
    """Pre-flight input ranges (min, max)."""

    tool_diameter_mm: Tuple[float, float] = (0.1, 50.0)
    spindle_power_kw: Tuple[float, float] = (0.1, 50.0)
    spindle_rpm: Tuple[float, float] = (100.0, 100000.0)
    feed_mm_min: Tuple[float, float] = (1.0, 50000.0)
    doc_mm: Tuple[float, float] = (0.01, 25.0)
    aggressiveness: Tuple[float, float] = (0.1, 3.0)
    flutes: Tuple[int, int] = (1, 20)
    rigidity: Tuple[float, float] = (0.5, 2.0)

    aspect_ratio_warning: float = 6.0
    aspect_ratio_error: float = 10.0
    doc_ratio_warning: float = 2.0
    doc_ratio_error: float = 3.0
    max_surface_speed_m_min: float = 1000.0

    # Post-calculation result checks
    result_power_warning_percent: float = 80.0
    result_power_danger_percent: float = 95.0
    result_feed_warning_fraction: float = 0.8


@dataclass
class ExportParams:
    """Settings/result file formats."""

    settings_version: str = "2.0.0"
    autosave_max_age_days: float = 7.0
    required_settings_keys: Tuple[str, ...] = ("machine", "spindle", "tool")


@dataclass
class MachiningConfig:
    """
    Master configuration aggregating all solver parameters.

    This is the SINGLE SOURCE OF TRUTH for the calculator.
    """

    project_name: str = "JustTheChip"
    version: str = "2.0.0"

    speed: SpeedParams = field(default_factory=SpeedParams)
    engagement: EngagementParams = field(default_factory=EngagementParams)
    power: PowerParams = field(default_factory=PowerParams)
    deflection: DeflectionParams = field(default_factory=DeflectionParams)
    diagnostics: DiagnosticParams = field(default_factory=DiagnosticParams)
    limits: ValidationLimits = field(default_factory=ValidationLimits)
    export: ExportParams = field(default_factory=ExportParams)

    def validate(self) -> List[str]:
        """
        Validate configuration constraints.
        Returns list of error messages (empty if valid).
        """
        errors = []

        if not 0 < self.power.spindle_efficiency <= 1:
            errors.append(
                f"Spindle efficiency {self.power.spindle_efficiency} must be in (0, 1]"
            )

        # Balancing must land strictly below the trigger or it re-fires forever
        if self.power.limit_target_fraction >= self.power.limit_trigger_fraction:
            errors.append(
                "Power limit target fraction must be below the trigger fraction "
                f"({self.power.limit_target_fraction} >= {self.power.limit_trigger_fraction})"
            )

        if self.deflection.warning_mm >= self.deflection.danger_mm:
            errors.append(
                f"Deflection warning threshold ({self.deflection.warning_mm} mm) "
                f"must be below danger threshold ({self.deflection.danger_mm} mm)"
            )

        missing_moduli = [m.value for m in ToolMaterial
                          if m not in self.deflection.youngs_modulus_mpa]
        if missing_moduli:
            errors.append(f"Missing Young's modulus for: {', '.join(missing_moduli)}")

        missing_holders = [h.value for h in HolderType
                           if h not in self.deflection.holder_compliance]
        if missing_holders:
            errors.append(f"Missing holder compliance for: {', '.join(missing_holders)}")

        if self.diagnostics.rubbing_fraction >= self.diagnostics.overload_fraction:
            errors.append("Chip-load rubbing fraction must be below overload fraction")

        lo, hi = self.limits.aggressiveness
        if not 0 < lo < hi:
            errors.append(f"Aggressiveness limits ({lo}, {hi}) are not an increasing range")

        return errors

    def summary(self) -> str:
        """Generate human-readable configuration summary."""
        return f"""
{self.project_name} Configuration Summary
==================================
Version: {self.version}

SPEED
-----
Generic cut factors: {len(self.speed.cut_speed_factors)}

POWER
-----
Spindle Efficiency: {self.power.spindle_efficiency:.0%}
Loss Surcharge: {self.power.spindle_loss_surcharge - 1:.0%}
Limit Trigger/Target: {self.power.limit_trigger_fraction:.0%} / {self.power.limit_target_fraction:.0%}

DEFLECTION
----------
Default Stickout: {self.deflection.default_stickout_mm:.1f} mm
Warning/Danger: {self.deflection.warning_mm:.3f} / {self.deflection.danger_mm:.3f} mm
Carbide E: {self.deflection.youngs_modulus_mpa[ToolMaterial.CARBIDE]:.0f} MPa

LIMITS
------
Aggressiveness: {self.limits.aggressiveness[0]} - {self.limits.aggressiveness[1]}
DOC: {self.limits.doc_mm[0]} - {self.limits.doc_mm[1]} mm
"""


# Singleton instance - import this throughout the project
config = MachiningConfig()

# Validate on import
_errors = config.validate()
if _errors:
    import warnings
    for err in _errors:
        warnings.warn(err, UserWarning)
