"""Radial (ae) and axial (ap) engagement resolution."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from config import config as default_config
from config.machining_config import MachiningConfig
from .diagnostics import DiagnosticLog
from .models import CutDefinition, Machine, Material
from .tools import Drill, Tool, VBit

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Engagement:
    """Resolved cut geometry in mm."""

    ae_mm: float
    ap_mm: float
    max_ap_mm: float                      # Material limit for this cut
    user_override: bool = False


def max_axial_depth(
    diameter_mm: float,
    material: Material,
    cut_type: str,
    cfg: MachiningConfig = default_config,
) -> float:
    """Deepest recommended pass for the material and cut (mm)."""
    fraction = material.max_axial_fraction.get(cut_type, cfg.engagement.default_fraction)
    return diameter_mm * fraction


def resolve_engagement(
    tool: Tool,
    material: Material,
    cut: CutDefinition,
    machine: Machine,
    user_doc_mm: Optional[float] = None,
    log: Optional[DiagnosticLog] = None,
    cfg: MachiningConfig = default_config,
) -> Engagement:
    """
    Resolve (ae, ap) for the tool and cut.

    Drills engage their full diameter at half a diameter deep. V-bits are
    sized from an assumed depth below the tip. Everything else takes the
    cut-type nominal fraction, limited by the material's per-cut maximum and
    scaled by the machine's radial/axial aggressiveness.

    A user depth of cut replaces ap outright; exceeding the material maximum
    is reported, not rejected.
    """
    log = log if log is not None else DiagnosticLog()
    params = cfg.engagement
    diameter = tool.effective_diameter(cfg)
    cut_type = cut.key

    if isinstance(tool, Drill):
        ae = diameter
        ap = diameter * params.drill_axial_fraction
    elif isinstance(tool, VBit):
        depth = tool.tip_diameter_mm + params.vbit_depth_allowance_mm
        ae = 2 * depth * math.tan(math.radians(tool.angle_deg) / 2)
        ap = depth
    else:
        if cut_type in params.full_width_cuts:
            ae = diameter
        else:
            max_radial = material.max_radial_fraction.get(cut_type, params.default_fraction)
            ae = min(diameter * cut.ae_fraction, diameter * max_radial)
            ae *= machine.aggressiveness.radial

        max_axial = material.max_axial_fraction.get(cut_type, params.default_fraction)
        ap = min(diameter * cut.ap_fraction, diameter * max_axial)
        ap *= machine.aggressiveness.axial

    max_ap = max_axial_depth(diameter, material, cut_type, cfg)

    if user_doc_mm is not None:
        ap = user_doc_mm
        if ap > max_ap:
            log.warning(
                f"User DOC ({ap:.2f}mm) exceeds recommended maximum ({max_ap:.2f}mm)"
            )

    logger.debug(f"Engagement {tool.tool_type}/{cut_type}: ae={ae:.3f} ap={ap:.3f}")
    return Engagement(
        ae_mm=ae, ap_mm=ap, max_ap_mm=max_ap, user_override=user_doc_mm is not None
    )
