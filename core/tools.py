"""
JustTheChip: Cutting Tool Variants
==================================

Closed set of tool variants. Every variant carries its own geometry plus the
shared mounting fields (stickout, shank, substrate, coating, holder) and
answers the per-type questions the solver asks:

    effective_diameter()   diameter used for surface speed and chip load
    effective_flutes()     cutting edges engaged per revolution
    force_factor           multiplier on chip-area cutting force
    power_factor           multiplier on required cutting power
    slender                whether the cantilever deflection model applies
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Type

from config import config as default_config
from config.machining_config import Coating, HolderType, MachiningConfig, ToolMaterial


@dataclass(frozen=True, kw_only=True)
class Tool(ABC):
    """Base class for all cutter variants."""

    stickout_mm: Optional[float] = None
    shank_mm: Optional[float] = None
    material: ToolMaterial = ToolMaterial.CARBIDE
    coating: Coating = Coating.UNCOATED
    holder: HolderType = HolderType.COLLET

    tool_type: ClassVar[str] = ""
    force_factor: ClassVar[float] = 1.0
    power_factor: ClassVar[float] = 1.0
    slender: ClassVar[bool] = False

    @abstractmethod
    def effective_diameter(self, cfg: MachiningConfig = default_config) -> float:
        """Diameter (mm) used for surface speed and chip-load lookup."""

    @abstractmethod
    def effective_flutes(self) -> int:
        """Cutting edges engaged per revolution."""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the catalog tool-type key as discriminator."""
        data: Dict[str, Any] = {"type": self.tool_type}
        for f in fields(self):
            value = getattr(self, f.name)
            data[f.name] = value.value if isinstance(value, Enum) else value
        return data


@dataclass(frozen=True)
class FlatEndMill(Tool):
    diameter_mm: float
    flutes: int = 2

    tool_type: ClassVar[str] = "endmill_flat"
    slender: ClassVar[bool] = True

    def effective_diameter(self, cfg: MachiningConfig = default_config) -> float:
        return self.diameter_mm

    def effective_flutes(self) -> int:
        return self.flutes


@dataclass(frozen=True)
class BallEndMill(Tool):
    diameter_mm: float
    flutes: int = 2

    tool_type: ClassVar[str] = "endmill_ball"
    power_factor: ClassVar[float] = 0.9
    slender: ClassVar[bool] = True

    def effective_diameter(self, cfg: MachiningConfig = default_config) -> float:
        return self.diameter_mm

    def effective_flutes(self) -> int:
        return self.flutes


@dataclass(frozen=True)
class ChamferMill(Tool):
    diameter_mm: float
    angle_deg: float = 90.0               # Included angle
    flutes: int = 2
    tip_diameter_mm: float = 0.0

    tool_type: ClassVar[str] = "chamfer"
    force_factor: ClassVar[float] = 0.7

    def effective_diameter(self, cfg: MachiningConfig = default_config) -> float:
        # Cone diameter at the assumed engagement depth, capped by the body
        depth = cfg.engagement.vbit_depth_allowance_mm
        half_angle = math.radians(self.angle_deg) / 2
        cone = self.tip_diameter_mm + 2 * depth * math.tan(half_angle)
        return min(self.diameter_mm, cone)

    def effective_flutes(self) -> int:
        return self.flutes


@dataclass(frozen=True)
class VBit(Tool):
    angle_deg: float                      # Included angle
    tip_diameter_mm: float = 0.0
    max_diameter_mm: Optional[float] = None
    flutes: int = 2

    tool_type: ClassVar[str] = "vbit"
    force_factor: ClassVar[float] = 0.7

    def effective_diameter(self, cfg: MachiningConfig = default_config) -> float:
        depth = cfg.engagement.vbit_depth_allowance_mm
        half_angle = math.radians(self.angle_deg) / 2
        return self.tip_diameter_mm + 2 * depth * math.tan(half_angle)

    def effective_flutes(self) -> int:
        return self.flutes


@dataclass(frozen=True)
class FaceMill(Tool):
    diameter_mm: float
    insert_count: int = 4
    insert_size_mm: Optional[float] = None
    max_doc_mm: Optional[float] = None

    tool_type: ClassVar[str] = "facemill"
    force_factor: ClassVar[float] = 0.6
    power_factor: ClassVar[float] = 0.7

    def effective_diameter(self, cfg: MachiningConfig = default_config) -> float:
        return self.diameter_mm

    def effective_flutes(self) -> int:
        return self.insert_count or 4


@dataclass(frozen=True)
class Drill(Tool):
    diameter_mm: float
    flutes: int = 2
    point_angle_deg: float = 118.0
    flute_length_mm: Optional[float] = None

    tool_type: ClassVar[str] = "drill"
    force_factor: ClassVar[float] = 1.5
    power_factor: ClassVar[float] = 1.1

    def effective_diameter(self, cfg: MachiningConfig = default_config) -> float:
        return self.diameter_mm

    def effective_flutes(self) -> int:
        return self.flutes


@dataclass(frozen=True)
class ThreadMill(Tool):
    diameter_mm: float
    pitch_mm: float = 1.0
    flutes: int = 2
    thread_depth_mm: Optional[float] = None

    tool_type: ClassVar[str] = "threadmill"

    def effective_diameter(self, cfg: MachiningConfig = default_config) -> float:
        return self.diameter_mm

    def effective_flutes(self) -> int:
        return self.flutes


@dataclass(frozen=True)
class TaperedEndMill(Tool):
    tip_diameter_mm: float
    taper_angle_deg: float
    flutes: int = 2
    flute_length_mm: float = 10.0

    tool_type: ClassVar[str] = "tapered"
    slender: ClassVar[bool] = True

    def effective_diameter(self, cfg: MachiningConfig = default_config) -> float:
        length = self.flute_length_mm or 10.0
        return self.tip_diameter_mm + length * math.tan(math.radians(self.taper_angle_deg))

    def effective_flutes(self) -> int:
        return self.flutes


@dataclass(frozen=True)
class BoringBar(Tool):
    min_bore_diameter_mm: float
    bar_diameter_mm: Optional[float] = None
    max_depth_mm: Optional[float] = None
    insert_type: Optional[str] = None

    tool_type: ClassVar[str] = "boring"

    def effective_diameter(self, cfg: MachiningConfig = default_config) -> float:
        return self.min_bore_diameter_mm

    def effective_flutes(self) -> int:
        return 1                          # Single-point insert


@dataclass(frozen=True)
class SlittingSaw(Tool):
    diameter_mm: float
    width_mm: float = 1.0
    teeth: int = 40
    arbor_hole_mm: Optional[float] = None

    tool_type: ClassVar[str] = "slitting"
    power_factor: ClassVar[float] = 1.2

    def effective_diameter(self, cfg: MachiningConfig = default_config) -> float:
        return self.diameter_mm

    def effective_flutes(self) -> int:
        return self.teeth or 40


TOOL_VARIANTS: Dict[str, Type[Tool]] = {
    cls.tool_type: cls
    for cls in (
        FlatEndMill, BallEndMill, ChamferMill, VBit, FaceMill,
        Drill, ThreadMill, TaperedEndMill, BoringBar, SlittingSaw,
    )
}

_ENUM_FIELDS = {"material": ToolMaterial, "coating": Coating, "holder": HolderType}


def tool_from_dict(data: Dict[str, Any]) -> Tool:
    """
    Rebuild a tool from its serialized form.

    Unknown keys are ignored so settings files may carry UI-only parameters.
    Raises ValueError for an unknown tool type or enum value.
    """
    tool_type = data.get("type")
    cls = TOOL_VARIANTS.get(tool_type)
    if cls is None:
        raise ValueError(f"Unknown tool type: {tool_type!r}")

    kwargs: Dict[str, Any] = {}
    for f in fields(cls):
        if f.name not in data or data[f.name] is None:
            continue
        value = data[f.name]
        if f.name in _ENUM_FIELDS:
            value = _ENUM_FIELDS[f.name](value)
        kwargs[f.name] = value
    try:
        return cls(**kwargs)
    except TypeError as exc:
        raise ValueError(f"Incomplete {tool_type} definition: {exc}") from exc
