"""
JustTheChip: Speed & Feed Resolution
====================================

Surface speed -> spindle RPM (clamped to the spindle range), then
chip load -> feed rate (with chip-thinning compensation, clamped to the
machine's slowest axis).

    vc  = mid(vc_range) x speed_factor x aggressiveness          [m/min]
    n   = vc x 1000 / (pi x D)                                    [rpm]
    fz  = mid(fz_range(D)) x aggressiveness x tool_factor         [mm/tooth]
    fz *= sqrt(D / ae)            when ae < D x thinning threshold
    vf  = n x z x fz                                              [mm/min]
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from config import config as default_config
from config.machining_config import MachiningConfig
from .diagnostics import DiagnosticLog
from .models import Machine, Material, Spindle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpeedResult:
    surface_speed_nominal_m_min: float
    rpm_nominal: float
    rpm: float
    surface_speed_m_min: float            # At the clamped RPM
    sfm: float


@dataclass(frozen=True)
class FeedResult:
    chip_load_range: Tuple[float, float]
    chip_load_nominal_mm: float           # Including chip thinning
    chip_load_mm: float                   # After the machine feed clamp
    thinning_factor: float
    feed_mm_min: float
    feed_clamped: bool = False


def nominal_surface_speed(
    material: Material, speed_factor: float, aggressiveness: float
) -> float:
    low, high = material.vc_range
    return (low + high) / 2 * speed_factor * aggressiveness


def rpm_for_surface_speed(surface_speed_m_min: float, diameter_mm: float) -> float:
    return surface_speed_m_min * 1000 / (math.pi * diameter_mm)


def clamp_rpm(rpm: float, spindle: Spindle) -> float:
    """Limit RPM to the spindle range; a clamped value is a fixed point."""
    return min(max(rpm, spindle.rpm_min), spindle.rpm_max)


def resolve_speed(
    diameter_mm: float,
    material: Material,
    speed_factor: float,
    aggressiveness: float,
    spindle: Spindle,
    log: Optional[DiagnosticLog] = None,
    cfg: MachiningConfig = default_config,
) -> SpeedResult:
    log = log if log is not None else DiagnosticLog()
    vc = nominal_surface_speed(material, speed_factor, aggressiveness)
    rpm_nominal = rpm_for_surface_speed(vc, diameter_mm)
    rpm = clamp_rpm(rpm_nominal, spindle)

    if rpm_nominal < spindle.rpm_min:
        log.warning("RPM limited by spindle minimum")
    elif rpm_nominal > spindle.rpm_max:
        log.warning("RPM limited by spindle maximum")

    vc_actual = math.pi * diameter_mm * rpm / 1000
    logger.debug(f"Speed: vc={vc:.1f} m/min, rpm {rpm_nominal:.0f} -> {rpm:.0f}")
    return SpeedResult(
        surface_speed_nominal_m_min=vc,
        rpm_nominal=rpm_nominal,
        rpm=rpm,
        surface_speed_m_min=vc_actual,
        sfm=vc_actual * cfg.speed.sfm_per_m_min,
    )


def nominal_chip_load(
    material: Material, tool_type: str, diameter_mm: float, aggressiveness: float
) -> float:
    """Table midpoint scaled by aggressiveness and the tool-type multiplier."""
    low, high = material.chip_load_range(diameter_mm)
    tool_factor = material.tool_chipload_factors.get(tool_type, 1.0)
    return (low + high) / 2 * aggressiveness * tool_factor


def chip_thinning_factor(diameter_mm: float, ae_mm: float, material: Material) -> float:
    """sqrt(D/ae) below the material's radial threshold, otherwise 1.0."""
    threshold = material.chip_thinning_below_fraction
    if threshold is None or ae_mm <= 0:
        return 1.0
    if ae_mm < diameter_mm * threshold:
        return math.sqrt(diameter_mm / ae_mm)
    return 1.0


def resolve_feed(
    tool_type: str,
    diameter_mm: float,
    flutes: int,
    rpm: float,
    ae_mm: float,
    material: Material,
    aggressiveness: float,
    machine: Machine,
    log: Optional[DiagnosticLog] = None,
) -> FeedResult:
    log = log if log is not None else DiagnosticLog()
    chip_range = material.chip_load_range(diameter_mm)
    chip_load = nominal_chip_load(material, tool_type, diameter_mm, aggressiveness)

    thinning = chip_thinning_factor(diameter_mm, ae_mm, material)
    if thinning != 1.0:
        chip_load *= thinning
        log.info("Chip thinning compensation applied")

    feed = rpm * flutes * chip_load
    adjusted = chip_load
    clamped = False

    max_feed = machine.max_feed_mm_min.ceiling
    if feed > max_feed:
        feed = max_feed
        adjusted = feed / (rpm * flutes)
        clamped = True
        log.warning("Feed limited by machine")

    logger.debug(f"Feed: fz={chip_load:.4f} (x{thinning:.3f}) vf={feed:.0f} mm/min")
    return FeedResult(
        chip_load_range=chip_range,
        chip_load_nominal_mm=chip_load,
        chip_load_mm=adjusted,
        thinning_factor=thinning,
        feed_mm_min=feed,
        feed_clamped=clamped,
    )
