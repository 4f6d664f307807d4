"""
JustTheChip: Domain Records
===========================

Immutable inputs (Machine, Spindle, Material, CutDefinition) and the
request/result records of a single cutting-parameter calculation.
Tools live in core.tools.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple

from .diagnostics import CuttingWarning
from .tools import Tool


@dataclass(frozen=True)
class AxisFeedLimits:
    """Per-axis rapid feed ceilings (mm/min)."""

    x: float
    y: float
    z: float

    @property
    def ceiling(self) -> float:
        """The slowest axis bounds any interpolated move."""
        return min(self.x, self.y, self.z)


@dataclass(frozen=True)
class Aggressiveness:
    """Machine-class engagement multipliers."""

    radial: float = 1.0
    axial: float = 1.0
    feed: float = 1.0


@dataclass(frozen=True)
class Machine:
    name: str
    max_feed_mm_min: AxisFeedLimits
    rigidity_factor: float = 1.0          # K, scales required power
    aggressiveness: Aggressiveness = field(default_factory=Aggressiveness)
    description: str = ""


@dataclass(frozen=True)
class Spindle:
    name: str
    rated_power_kw: float
    rpm_min: float
    rpm_max: float
    base_rpm: float                       # Constant-torque / constant-power boundary
    cooling: str = ""


@dataclass(frozen=True)
class ChipLoadBucket:
    """Chip-load band for tools up to max_diameter_mm."""

    max_diameter_mm: float
    chip_load_range: Tuple[float, float]


@dataclass(frozen=True)
class Material:
    key: str
    name: str
    category: str
    vc_range: Tuple[float, float]                        # m/min
    chip_load_table: Tuple[ChipLoadBucket, ...]
    force_coefficient_kn_mm2: float
    specific_cutting_energy_j_mm3: Optional[float] = None
    tool_chipload_factors: Dict[str, float] = field(default_factory=dict)
    max_radial_fraction: Dict[str, float] = field(default_factory=dict)
    max_axial_fraction: Dict[str, float] = field(default_factory=dict)
    chip_thinning_below_fraction: Optional[float] = None
    thermal_conductivity: Optional[float] = None         # W/m.K
    notes: str = ""

    def chip_load_range(self, diameter_mm: float) -> Tuple[float, float]:
        """First bucket whose breakpoint covers the diameter, else the last one."""
        for bucket in self.chip_load_table:
            if diameter_mm <= bucket.max_diameter_mm:
                return bucket.chip_load_range
        return self.chip_load_table[-1].chip_load_range


@dataclass(frozen=True)
class CutDefinition:
    """Nominal engagement fractions (of tool diameter) for a cut type."""

    key: str
    name: str
    ae_fraction_range: Tuple[float, float]
    ap_fraction_range: Tuple[float, float]
    tool_types: Tuple[str, ...] = ()

    @property
    def ae_fraction(self) -> float:
        return sum(self.ae_fraction_range) / 2

    @property
    def ap_fraction(self) -> float:
        return sum(self.ap_fraction_range) / 2


@dataclass(frozen=True)
class CalculationRequest:
    machine: Machine
    spindle: Spindle
    tool: Tool
    material: Material
    cut_type: str
    aggressiveness: float = 1.0
    user_doc_mm: Optional[float] = None


@dataclass(frozen=True)
class DeflectionBreakdown:
    """Tool-tip deflection components (mm)."""

    bending_mm: float = 0.0
    shear_mm: float = 0.0
    holder_mm: float = 0.0

    @property
    def total_mm(self) -> float:
        return self.bending_mm + self.shear_mm + self.holder_mm


@dataclass(frozen=True)
class CalculationResult:
    """Recommended operating point for one material x cut-type combination."""

    rpm: float
    feed_mm_min: float
    chip_load_mm: float                   # After feed clamp and power scaling
    chip_load_nominal_mm: float           # Table value incl. chip thinning
    ae_mm: float
    ap_mm: float
    mrr_mm3_min: float
    power_required_w: float
    power_available_w: float
    power_scale_factor: float
    cutting_force_n: float
    deflection: DeflectionBreakdown
    surface_speed_m_min: float
    sfm: float
    effective_diameter_mm: float
    effective_flutes: int
    tool_type: str
    material_key: str
    cut_type: str
    user_doc_override: bool
    warnings: Tuple[CuttingWarning, ...] = ()

    @property
    def doc_mm(self) -> float:
        return self.ap_mm

    @property
    def deflection_mm(self) -> float:
        return self.deflection.total_mm

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["deflection"]["total_mm"] = self.deflection.total_mm
        data["warnings"] = [w.to_dict() for w in self.warnings]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CalculationResult":
        values = dict(data)
        deflection = dict(values.pop("deflection"))
        deflection.pop("total_mm", None)
        values["deflection"] = DeflectionBreakdown(**deflection)
        values["warnings"] = tuple(
            CuttingWarning.from_dict(w) for w in values.get("warnings", ())
        )
        return cls(**values)
