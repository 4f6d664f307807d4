"""
JustTheChip: Cutting-Parameter Solver
=====================================

Runs the pipeline for one operation:

    Engagement -> Speed -> Feed -> Power balance -> Force & Deflection
               -> Diagnostics -> CalculationResult

Each call is a pure function of the request and the injected catalog. A fresh
DiagnosticLog is threaded through the stages and frozen onto the result.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from itertools import product
from typing import Iterable, List, Optional, Tuple

from config import config as default_config
from config.machining_config import MachiningConfig
from .catalog import Catalog, CatalogError, load_default_catalog
from .deflection import DeflectionModel, cutting_force_n
from .diagnostics import DiagnosticLog, check_chip_load, check_deflection, check_tool_heuristics
from .engagement import resolve_engagement
from .models import CalculationRequest, CalculationResult, Machine, Spindle
from .power import balance_power
from .speeds_feeds import resolve_feed, resolve_speed
from .tools import Tool
from .validation import validate_request

logger = logging.getLogger(__name__)


@dataclass
class MatrixEntry:
    """One material x cut-type cell; either a result or validation errors."""

    material_key: str
    cut_type: str
    result: Optional[CalculationResult] = None
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.result is not None


class SpeedsFeedsSolver:
    """Cutting-parameter solver bound to a catalog and configuration."""

    def __init__(
        self,
        catalog: Optional[Catalog] = None,
        cfg: MachiningConfig = default_config,
    ):
        self.cfg = cfg
        self.catalog = catalog if catalog is not None else load_default_catalog(cfg)
        self.deflection_model = DeflectionModel(cfg)

    def calculate(self, request: CalculationRequest) -> CalculationResult:
        """Solve one operating point. Never raises for physical-limit violations."""
        cfg = self.cfg
        log = DiagnosticLog()
        tool = request.tool
        material = request.material
        machine = request.machine
        spindle = request.spindle

        diameter = tool.effective_diameter(cfg)
        flutes = tool.effective_flutes()
        cut = self.catalog.cut_definition(request.cut_type)

        engagement = resolve_engagement(
            tool, material, cut, machine, request.user_doc_mm, log, cfg
        )
        ae, ap = engagement.ae_mm, engagement.ap_mm

        speed = resolve_speed(
            diameter,
            material,
            self.catalog.speed_factor(tool.tool_type, request.cut_type),
            request.aggressiveness,
            spindle,
            log,
            cfg,
        )

        feed = resolve_feed(
            tool.tool_type, diameter, flutes, speed.rpm, ae,
            material, request.aggressiveness, machine, log,
        )

        power = balance_power(
            tool, diameter, ae, ap, feed.feed_mm_min, feed.chip_load_mm,
            speed.rpm, material, machine, spindle, log, cfg,
        )

        force = cutting_force_n(tool, material, ae, power.chip_load_mm)
        deflection = self.deflection_model.analyze(tool, force)
        if tool.slender:
            check_deflection(deflection.total_mm, log, cfg)

        check_chip_load(power.chip_load_mm, feed.chip_load_range, tool.tool_type, log, cfg)
        check_tool_heuristics(
            tool.tool_type, diameter, ap, power.feed_mm_min, force,
            request.user_doc_mm, log, cfg,
        )

        logger.debug(
            f"{material.key}/{request.cut_type}: {speed.rpm:.0f} rpm, "
            f"{power.feed_mm_min:.0f} mm/min, {len(log)} warnings"
        )

        return CalculationResult(
            rpm=speed.rpm,
            feed_mm_min=power.feed_mm_min,
            chip_load_mm=power.chip_load_mm,
            chip_load_nominal_mm=feed.chip_load_nominal_mm,
            ae_mm=ae,
            ap_mm=ap,
            mrr_mm3_min=power.mrr_mm3_min,
            power_required_w=power.power_required_w,
            power_available_w=power.power_available_w,
            power_scale_factor=power.scale_factor,
            cutting_force_n=force,
            deflection=deflection,
            surface_speed_m_min=speed.surface_speed_m_min,
            sfm=speed.sfm,
            effective_diameter_mm=diameter,
            effective_flutes=flutes,
            tool_type=tool.tool_type,
            material_key=material.key,
            cut_type=request.cut_type,
            user_doc_override=engagement.user_override,
            warnings=log.entries,
        )

    def calculate_checked(self, request: CalculationRequest) -> CalculationResult:
        """Pre-flight validate, raising ConfigurationError, then solve."""
        validate_request(request, self.catalog, self.cfg).raise_for_errors()
        return self.calculate(request)

    def calculate_matrix(
        self,
        machine: Machine,
        spindle: Spindle,
        tool: Tool,
        material_keys: Iterable[str],
        cut_types: Iterable[str],
        aggressiveness: float = 1.0,
        user_doc_mm: Optional[float] = None,
        max_workers: Optional[int] = None,
    ) -> List[MatrixEntry]:
        """
        Solve every material x cut-type combination.

        Cells are independent; with max_workers they run on a thread pool and
        come back in input order either way.
        """
        cells: List[Tuple[str, str]] = list(product(material_keys, cut_types))

        def solve_cell(cell: Tuple[str, str]) -> MatrixEntry:
            material_key, cut_type = cell
            entry = MatrixEntry(material_key=material_key, cut_type=cut_type)
            try:
                material = self.catalog.material(material_key)
            except CatalogError as exc:
                entry.errors.append(str(exc))
                return entry

            request = CalculationRequest(
                machine=machine,
                spindle=spindle,
                tool=tool,
                material=material,
                cut_type=cut_type,
                aggressiveness=aggressiveness,
                user_doc_mm=user_doc_mm,
            )
            report = validate_request(request, self.catalog, self.cfg)
            if not report.is_valid:
                entry.errors.extend(str(issue) for issue in report.errors)
                return entry

            entry.result = self.calculate(request)
            return entry

        if max_workers and max_workers > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                return list(pool.map(solve_cell, cells))
        return [solve_cell(cell) for cell in cells]


def build_request(
    catalog: Catalog,
    machine_key: str,
    spindle_key: str,
    tool: Tool,
    material_key: str,
    cut_type: str,
    aggressiveness: float = 1.0,
    user_doc_mm: Optional[float] = None,
) -> CalculationRequest:
    """Assemble a request from catalog keys. Raises CatalogError on unknown keys."""
    return CalculationRequest(
        machine=catalog.machine(machine_key),
        spindle=catalog.spindle(spindle_key),
        tool=tool,
        material=catalog.material(material_key),
        cut_type=cut_type,
        aggressiveness=aggressiveness,
        user_doc_mm=user_doc_mm,
    )
