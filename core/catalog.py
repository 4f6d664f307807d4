"""
JustTheChip: Catalog
====================

Typed, read-only view of the preset tables (tool types, cut types,
materials, spindles, machines). A Catalog is built once at start-up and
passed explicitly into the solver, so tests can inject synthetic data.

Lookup policy:
    cut types / speed factors   fall back to conservative defaults
    materials / machines / spindles   raise CatalogError (configuration error)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from config import CATALOG_DATA
from config import config as default_config
from config.machining_config import MachiningConfig
from .models import (
    Aggressiveness,
    AxisFeedLimits,
    ChipLoadBucket,
    CutDefinition,
    Machine,
    Material,
    Spindle,
)

logger = logging.getLogger(__name__)


class CatalogError(KeyError):
    """Unknown catalog key for a record the solver cannot default."""

    def __init__(self, kind: str, key: str):
        super().__init__(key)
        self.kind = kind
        self.key = key

    def __str__(self) -> str:
        return f"Unknown {self.kind}: {self.key!r}"


@dataclass(frozen=True)
class ToolTypeDefinition:
    key: str
    name: str
    parameters: Tuple[str, ...] = ()
    supported_cuts: Tuple[str, ...] = ()
    speed_factors: Dict[str, float] = field(default_factory=dict)


def _pair(values: Any) -> Tuple[float, float]:
    low, high = values
    return float(low), float(high)


def _parse_cut(key: str, raw: Mapping[str, Any]) -> CutDefinition:
    if "ae_fraction_range" in raw:
        ae_range = _pair(raw["ae_fraction_range"])
    else:
        fraction = float(raw.get("ae_fraction", 1.0))
        ae_range = (fraction, fraction)
    return CutDefinition(
        key=key,
        name=raw.get("name", key),
        ae_fraction_range=ae_range,
        ap_fraction_range=_pair(raw.get("ap_fraction_range", (1.0, 1.0))),
        tool_types=tuple(raw.get("tool_types", ())),
    )


def _parse_material(key: str, raw: Mapping[str, Any]) -> Material:
    buckets = tuple(
        ChipLoadBucket(float(b["max_d_mm"]), _pair(b["range"]))
        for b in raw["fz_by_diameter"]
    )
    return Material(
        key=key,
        name=raw.get("name", key),
        category=raw.get("category", ""),
        vc_range=_pair(raw["vc_range"]),
        chip_load_table=buckets,
        force_coefficient_kn_mm2=float(raw["force_coeff_kn_mm2"]),
        specific_cutting_energy_j_mm3=raw.get("specific_cutting_energy_j_mm3"),
        tool_chipload_factors=dict(raw.get("tool_chipload_factors", {})),
        max_radial_fraction=dict(raw.get("max_radial_engagement_fraction", {})),
        max_axial_fraction=dict(raw.get("max_axial_per_pass_d", {})),
        chip_thinning_below_fraction=raw.get("chip_thinning_below_fraction"),
        thermal_conductivity=raw.get("thermal_conductivity"),
        notes=raw.get("notes", ""),
    )


def _parse_spindle(key: str, raw: Mapping[str, Any]) -> Spindle:
    return Spindle(
        name=raw.get("name", key),
        rated_power_kw=float(raw["rated_power_kw"]),
        rpm_min=float(raw["rpm_min"]),
        rpm_max=float(raw["rpm_max"]),
        base_rpm=float(raw["base_rpm"]),
        cooling=raw.get("cooling", ""),
    )


def _parse_machine(key: str, raw: Mapping[str, Any]) -> Machine:
    feeds = raw["max_feed_mm_min"]
    aggr = raw.get("aggressiveness", {})
    return Machine(
        name=raw.get("name", key),
        max_feed_mm_min=AxisFeedLimits(
            x=float(feeds["x"]), y=float(feeds["y"]), z=float(feeds["z"])
        ),
        rigidity_factor=float(raw.get("rigidity_factor", 1.0)),
        aggressiveness=Aggressiveness(
            radial=float(aggr.get("radial", 1.0)),
            axial=float(aggr.get("axial", 1.0)),
            feed=float(aggr.get("feed", 1.0)),
        ),
        description=raw.get("description", ""),
    )


class Catalog:
    """Injected configuration data for the solver."""

    def __init__(
        self,
        tool_types: Optional[Dict[str, ToolTypeDefinition]] = None,
        cut_types: Optional[Dict[str, CutDefinition]] = None,
        materials: Optional[Dict[str, Material]] = None,
        spindles: Optional[Dict[str, Spindle]] = None,
        machines: Optional[Dict[str, Machine]] = None,
        cfg: MachiningConfig = default_config,
    ):
        self.tool_types = tool_types or {}
        self.cut_types = cut_types or {}
        self.materials = materials or {}
        self.spindles = spindles or {}
        self.machines = machines or {}
        self.cfg = cfg

    @classmethod
    def from_mapping(
        cls, data: Mapping[str, Any], cfg: MachiningConfig = default_config
    ) -> "Catalog":
        """Build from the serialized table shape used in config.catalog_data."""
        tool_types = {
            key: ToolTypeDefinition(
                key=key,
                name=raw.get("name", key),
                parameters=tuple(raw.get("parameters", ())),
                supported_cuts=tuple(raw.get("supported_cuts", ())),
                speed_factors=dict(raw.get("speed_factors", {})),
            )
            for key, raw in data.get("tool_types", {}).items()
        }
        catalog = cls(
            tool_types=tool_types,
            cut_types={k: _parse_cut(k, v) for k, v in data.get("cut_types", {}).items()},
            materials={k: _parse_material(k, v) for k, v in data.get("materials", {}).items()},
            spindles={k: _parse_spindle(k, v) for k, v in data.get("spindles", {}).items()},
            machines={k: _parse_machine(k, v) for k, v in data.get("machines", {}).items()},
            cfg=cfg,
        )
        logger.debug(
            f"Catalog loaded: {len(catalog.materials)} materials, "
            f"{len(catalog.tool_types)} tool types, {len(catalog.cut_types)} cut types"
        )
        return catalog

    @classmethod
    def from_json(cls, path: Path, cfg: MachiningConfig = default_config) -> "Catalog":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        logger.info(f"Loaded catalog from {path}")
        return cls.from_mapping(data, cfg=cfg)

    # === STRICT LOOKUPS ===

    def material(self, key: str) -> Material:
        try:
            return self.materials[key]
        except KeyError:
            raise CatalogError("material", key) from None

    def machine(self, key: str) -> Machine:
        try:
            return self.machines[key]
        except KeyError:
            raise CatalogError("machine", key) from None

    def spindle(self, key: str) -> Spindle:
        try:
            return self.spindles[key]
        except KeyError:
            raise CatalogError("spindle", key) from None

    # === DEFAULTING LOOKUPS ===

    def cut_definition(self, cut_type: str) -> CutDefinition:
        """Known cut, or a full-engagement placeholder for an unknown key."""
        cut = self.cut_types.get(cut_type)
        if cut is not None:
            return cut
        fraction = self.cfg.engagement.default_fraction
        logger.debug(f"Unknown cut type {cut_type!r}; using fraction {fraction}")
        return CutDefinition(
            key=cut_type,
            name=cut_type,
            ae_fraction_range=(fraction, fraction),
            ap_fraction_range=(fraction, fraction),
        )

    def speed_factor(self, tool_type: str, cut_type: str) -> float:
        """Tool-type factor for the cut, then the generic cut factor, then 1.0."""
        definition = self.tool_types.get(tool_type)
        if definition is not None and cut_type in definition.speed_factors:
            return definition.speed_factors[cut_type]
        return self.cfg.speed.cut_speed_factors.get(
            cut_type, self.cfg.speed.default_speed_factor
        )

    def supported_cuts(self, tool_type: str) -> List[str]:
        definition = self.tool_types.get(tool_type)
        return list(definition.supported_cuts) if definition else []

    def cut_types_for_tool(self, tool_type: str) -> List[CutDefinition]:
        return [cut for cut in self.cut_types.values() if tool_type in cut.tool_types]


def load_default_catalog(cfg: MachiningConfig = default_config) -> Catalog:
    """Catalog built from the bundled preset tables."""
    return Catalog.from_mapping(CATALOG_DATA, cfg=cfg)
