"""Cutting force and cantilever tool deflection for end mills."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np
from scipy.optimize import brentq

from config import config as default_config
from config.machining_config import HolderType, MachiningConfig, ToolMaterial
from .models import DeflectionBreakdown, Material
from .tools import Tool

logger = logging.getLogger(__name__)


@dataclass
class ToolSection:
    """Solid round shank treated as a cantilever beam."""

    diameter_mm: float
    modulus_mpa: float

    @property
    def inertia(self) -> float:
        """Second moment of area (mm^4)."""
        return math.pi * self.diameter_mm**4 / 64

    @property
    def area(self) -> float:
        return math.pi * self.diameter_mm**2 / 4


@dataclass(frozen=True)
class CriticalForce:
    yield_limit_n: float
    deflection_limit_n: float
    safety_margin: float = 2.0

    @property
    def critical_force_n(self) -> float:
        return min(self.yield_limit_n, self.deflection_limit_n)

    @property
    def limiting_factor(self) -> str:
        if self.yield_limit_n <= self.deflection_limit_n:
            return "yield_strength"
        return "deflection"


@dataclass(frozen=True)
class StickoutRecommendation:
    diameter_mm: float
    max_stickout_mm: float
    deflection_mm: float

    @property
    def aspect_ratio(self) -> float:
        return self.max_stickout_mm / self.diameter_mm


@dataclass(frozen=True)
class DeflectionAnalysis:
    status: str                           # excellent / good / acceptable / excessive
    severity: str
    message: str
    percent_of_diameter: float
    recommendations: List[str] = field(default_factory=list)


def cutting_force_n(
    tool: Tool, material: Material, ae_mm: float, chip_load_mm: float
) -> float:
    """Tangential force from chip area: kN/mm^2 x mm^2 x 1000 = N."""
    chip_area = ae_mm * chip_load_mm
    return material.force_coefficient_kn_mm2 * chip_area * 1000 * tool.force_factor


class DeflectionModel:
    """Bending + shear + holder compliance estimator for slender cutters."""

    def __init__(self, cfg: MachiningConfig = default_config):
        self.cfg = cfg
        self.params = cfg.deflection

    def modulus(self, material: ToolMaterial) -> float:
        return self.params.youngs_modulus_mpa.get(
            material, self.params.youngs_modulus_mpa[ToolMaterial.CARBIDE]
        )

    def section_for(self, tool: Tool) -> ToolSection:
        diameter = tool.shank_mm or tool.effective_diameter(self.cfg)
        return ToolSection(diameter_mm=diameter, modulus_mpa=self.modulus(tool.material))

    def stickout_for(self, tool: Tool) -> float:
        return tool.stickout_mm or self.params.default_stickout_mm

    def bending_mm(self, force_n: float, length_mm: float, section: ToolSection) -> float:
        return force_n * length_mm**3 / (3 * section.modulus_mpa * section.inertia)

    def shear_mm(self, force_n: float, length_mm: float, section: ToolSection) -> float:
        shear_modulus = section.modulus_mpa / self.params.shear_modulus_ratio
        return self.params.shear_shape_factor * force_n * length_mm / (shear_modulus * section.area)

    def holder_mm(self, force_n: float, holder: HolderType) -> float:
        compliance = self.params.holder_compliance.get(
            holder, self.params.holder_compliance[HolderType.COLLET]
        )
        return force_n * compliance

    def analyze(
        self, tool: Tool, force_n: float, stickout_mm: Optional[float] = None
    ) -> DeflectionBreakdown:
        """Deflection components; zero for tools the beam model does not cover."""
        if not tool.slender:
            return DeflectionBreakdown()

        length = stickout_mm or self.stickout_for(tool)
        section = self.section_for(tool)
        return DeflectionBreakdown(
            bending_mm=self.bending_mm(force_n, length, section),
            shear_mm=self.shear_mm(force_n, length, section),
            holder_mm=self.holder_mm(force_n, tool.holder),
        )

    def critical_force(self, tool: Tool, stickout_mm: Optional[float] = None) -> CriticalForce:
        """Force at which the shank yields or deflects 1% of its diameter."""
        length = stickout_mm or self.stickout_for(tool)
        section = self.section_for(tool)
        yield_strength = self.params.yield_strength_mpa.get(tool.material, 3000.0)

        c = section.diameter_mm / 2
        yield_limit = yield_strength * section.inertia / (c * length)
        allowed = section.diameter_mm / 100
        deflection_limit = 3 * section.modulus_mpa * section.inertia * allowed / length**3
        return CriticalForce(yield_limit_n=yield_limit, deflection_limit_n=deflection_limit)

    def optimize_for_deflection(
        self,
        target_mm: float,
        force_n: float,
        diameters_mm: Optional[Sequence[float]] = None,
        max_stickout_mm: Optional[float] = None,
        material: ToolMaterial = ToolMaterial.CARBIDE,
        holder: HolderType = HolderType.COLLET,
    ) -> List[StickoutRecommendation]:
        """
        Longest stickout per candidate diameter that keeps total deflection
        at or under the target, ranked by aspect ratio (stiffest first).
        """
        if force_n <= 0:
            raise ValueError(f"Cutting force must be positive, got {force_n}")

        params = self.params
        max_length = max_stickout_mm or params.max_stickout_mm
        if diameters_mm is None:
            diameters_mm = params.candidate_diameters_mm
        candidates = np.asarray(diameters_mm, dtype=float)
        modulus = self.modulus(material)
        holder_term = self.holder_mm(force_n, holder)

        # Bending-only lengths bound the root from above
        inertia = np.pi * candidates**4 / 64
        budget = target_mm - holder_term
        if budget <= 0:
            return []
        upper = np.cbrt(3 * modulus * inertia * budget / force_n)

        results: List[StickoutRecommendation] = []
        for diameter, bound in zip(candidates, upper):
            section = ToolSection(diameter_mm=float(diameter), modulus_mpa=modulus)

            def excess(length: float) -> float:
                return (self.bending_mm(force_n, length, section)
                        + self.shear_mm(force_n, length, section)
                        + holder_term - target_mm)

            hi = min(float(bound), max_length)
            if excess(hi) <= 0:
                length = hi
            else:
                length = brentq(excess, 0.0, hi)

            length = math.floor(length)
            if length < params.min_practical_stickout_mm:
                continue

            deflection = excess(length) + target_mm
            results.append(StickoutRecommendation(
                diameter_mm=float(diameter),
                max_stickout_mm=float(length),
                deflection_mm=deflection,
            ))

        results.sort(key=lambda rec: rec.aspect_ratio)
        logger.debug(f"Stickout optimizer: {len(results)} candidates for {target_mm} mm")
        return results[: params.max_recommendations]


def analyze_deflection(
    deflection_mm: float, diameter_mm: float, cfg: MachiningConfig = default_config
) -> DeflectionAnalysis:
    """Grade deflection against finishing/roughing tolerances."""
    params = cfg.deflection
    recommendations: List[str] = []

    if deflection_mm <= params.finish_limit_mm:
        status, severity, message = "excellent", "info", "Deflection within finishing tolerance"
    elif deflection_mm <= params.semi_finish_limit_mm:
        status, severity, message = "good", "info", "Deflection suitable for semi-finishing"
    elif deflection_mm <= params.rough_limit_mm:
        status, severity, message = (
            "acceptable", "warning", "Deflection acceptable for roughing only"
        )
        recommendations.append("Consider reducing cutting parameters for better finish")
    else:
        status, severity, message = (
            "excessive", "danger",
            "Excessive deflection - risk of poor finish or tool breakage",
        )
        recommendations.extend([
            "Reduce cutting forces",
            "Use shorter/larger diameter tool",
            "Improve tool holder rigidity",
        ])

    percent = deflection_mm / diameter_mm * 100 if diameter_mm > 0 else 0.0
    if percent > 1.0:
        recommendations.append("Deflection > 1% of tool diameter")

    return DeflectionAnalysis(
        status=status,
        severity=severity,
        message=message,
        percent_of_diameter=percent,
        recommendations=recommendations,
    )
