"""
JustTheChip: Spindle Power
==========================

Required cutting power vs. the spindle's available power curve, and the
single-pass power balancer:

    P_req   = MRR x E_sp / 60 x tool_factor x K x 1.15          [W]
    P_avail = rated x (n / n_base) x min(n / 1.5 n_min, 1) x 0.85   n <= n_base
            = rated x 0.85                                           n >  n_base
            = 0                                     outside [n_min, n_max]

If P_req > 0.9 P_avail, feed, chip load and MRR are scaled by
0.85 P_avail / P_req once; nothing is re-clamped afterwards.

The report helpers at the bottom (losses, coating efficiency, torque,
utilization, tool heat) are advisory and do not feed back into the solver.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from config import config as default_config
from config.machining_config import MachiningConfig
from .diagnostics import DiagnosticLog
from .models import Machine, Material, Spindle
from .tools import Drill, Tool

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PowerBalance:
    mrr_mm3_min: float                    # After scaling
    power_required_w: float               # Demand before scaling
    power_available_w: float
    scale_factor: float                   # 1.0 when not limited
    feed_mm_min: float
    chip_load_mm: float

    @property
    def limited(self) -> bool:
        return self.scale_factor < 1.0


def material_removal_rate(
    tool: Tool, diameter_mm: float, ae_mm: float, ap_mm: float, feed_mm_min: float
) -> float:
    """mm^3/min: circular section for drills, rectangular otherwise."""
    if isinstance(tool, Drill):
        return math.pi * diameter_mm**2 / 4 * feed_mm_min
    return ae_mm * ap_mm * feed_mm_min


def specific_cutting_energy(
    material: Material, cfg: MachiningConfig = default_config
) -> float:
    """J/mm^3 from the material, else a category fallback."""
    if material.specific_cutting_energy_j_mm3:
        return material.specific_cutting_energy_j_mm3
    return cfg.power.category_specific_energy.get(
        material.category, cfg.power.default_specific_energy
    )


def required_power_w(
    mrr_mm3_min: float,
    material: Material,
    tool: Tool,
    machine: Machine,
    cfg: MachiningConfig = default_config,
) -> float:
    base = mrr_mm3_min * specific_cutting_energy(material, cfg) / 60
    return base * tool.power_factor * machine.rigidity_factor * cfg.power.spindle_loss_surcharge


def available_power_w(
    spindle: Spindle, rpm: float, cfg: MachiningConfig = default_config
) -> float:
    """Spindle power at the given speed after efficiency losses."""
    if rpm < spindle.rpm_min or rpm > spindle.rpm_max:
        return 0.0

    rated_w = spindle.rated_power_kw * 1000
    if rpm <= spindle.base_rpm:
        # Constant-torque region; torque itself ramps up off the bottom end
        torque_ratio = min(rpm / (spindle.rpm_min * cfg.power.torque_ramp_factor), 1.0)
        power = rated_w * (rpm / spindle.base_rpm) * torque_ratio
    else:
        power = rated_w
    return power * cfg.power.spindle_efficiency


def balance_power(
    tool: Tool,
    diameter_mm: float,
    ae_mm: float,
    ap_mm: float,
    feed_mm_min: float,
    chip_load_mm: float,
    rpm: float,
    material: Material,
    machine: Machine,
    spindle: Spindle,
    log: Optional[DiagnosticLog] = None,
    cfg: MachiningConfig = default_config,
) -> PowerBalance:
    log = log if log is not None else DiagnosticLog()
    params = cfg.power

    mrr = material_removal_rate(tool, diameter_mm, ae_mm, ap_mm, feed_mm_min)
    required = required_power_w(mrr, material, tool, machine, cfg)
    available = available_power_w(spindle, rpm, cfg)

    scale = 1.0
    if required > available * params.limit_trigger_fraction:
        scale = available * params.limit_target_fraction / required
        log.warning("Power limited")
        logger.debug(f"Power limited: {required:.0f} W > {available:.0f} W, scale {scale:.3f}")

    return PowerBalance(
        mrr_mm3_min=mrr * scale,
        power_required_w=required,
        power_available_w=available,
        scale_factor=scale,
        feed_mm_min=feed_mm_min * scale,
        chip_load_mm=chip_load_mm * scale,
    )


# === POWER REPORT ===

@dataclass(frozen=True)
class CuttingPowerReport:
    mrr_mm3_min: float
    specific_energy_j_mm3: float
    tool_efficiency: float
    net_cutting_power_w: float
    spindle_losses_w: float
    total_spindle_power_w: float
    total_motor_power_w: float


@dataclass(frozen=True)
class PowerUtilization:
    utilization_percent: float
    available_power_w: float
    required_power_w: float
    status: str                           # good / warning / danger / error
    message: str


@dataclass(frozen=True)
class SpindleTorque:
    omega_rad_s: float
    base_torque_nm: float
    torque_factor: float

    @property
    def effective_torque_nm(self) -> float:
        return self.base_torque_nm * self.torque_factor


def net_cutting_power_w(
    mrr_mm3_min: float,
    specific_energy_j_mm3: float,
    efficiency: float = 1.0,
    factor: float = 1.0,
) -> float:
    """Power at the cutting edge, before spindle losses."""
    return mrr_mm3_min * specific_energy_j_mm3 / 60 * factor / efficiency


def tool_efficiency(tool: Tool, cfg: MachiningConfig = default_config) -> float:
    efficiency = cfg.power.coating_efficiency.get(tool.coating, 0.8)
    return efficiency * cfg.power.tool_efficiency_penalty.get(tool.tool_type, 1.0)


def spindle_losses_w(
    spindle: Spindle, rpm: float, cfg: MachiningConfig = default_config
) -> float:
    """Bearing friction and windage, growing with speed."""
    params = cfg.power
    base = spindle.rated_power_kw * 1000 * params.base_loss_fraction
    speed_term = (rpm / spindle.base_rpm) ** params.rpm_loss_exponent
    return base + base * params.rpm_loss_fraction * speed_term


def cutting_power_report(
    tool: Tool,
    cut_type: str,
    material: Material,
    machine: Machine,
    spindle: Spindle,
    rpm: float,
    ae_mm: float,
    ap_mm: float,
    feed_mm_min: float,
    cfg: MachiningConfig = default_config,
) -> CuttingPowerReport:
    """Detailed power breakdown including coating efficiency and drive losses."""
    params = cfg.power
    mrr = ae_mm * ap_mm * feed_mm_min
    energy = specific_cutting_energy(material, cfg)
    efficiency = tool_efficiency(tool, cfg)
    factor = (
        params.report_tool_factors.get(tool.tool_type, 1.0)
        * params.report_cut_factors.get(cut_type, 1.0)
        * machine.rigidity_factor
    )
    net = net_cutting_power_w(mrr, energy, efficiency, factor)
    losses = spindle_losses_w(spindle, rpm, cfg)
    spindle_total = net + losses
    return CuttingPowerReport(
        mrr_mm3_min=mrr,
        specific_energy_j_mm3=energy,
        tool_efficiency=efficiency,
        net_cutting_power_w=net,
        spindle_losses_w=losses,
        total_spindle_power_w=spindle_total,
        total_motor_power_w=spindle_total / params.drive_efficiency,
    )


def analyze_power_utilization(
    required_w: float,
    spindle: Spindle,
    rpm: float,
    cfg: MachiningConfig = default_config,
) -> PowerUtilization:
    available = available_power_w(spindle, rpm, cfg)
    if available == 0:
        return PowerUtilization(
            utilization_percent=0.0,
            available_power_w=0.0,
            required_power_w=required_w,
            status="error",
            message="RPM outside spindle operating range",
        )

    percent = required_w / available * 100
    if percent <= cfg.power.utilization_warning_percent:
        status, message = "good", "Power utilization within safe limits"
    elif percent <= cfg.power.utilization_danger_percent:
        status, message = "warning", "High power utilization - consider reducing parameters"
    else:
        status, message = "danger", "Power requirement exceeds spindle capability"

    return PowerUtilization(
        utilization_percent=percent,
        available_power_w=available,
        required_power_w=required_w,
        status=status,
        message=message,
    )


def spindle_torque(
    rpm: float,
    power_w: float,
    tool: Tool,
    cut_type: str,
    cfg: MachiningConfig = default_config,
) -> SpindleTorque:
    """Torque from power at speed, with flute-count and cut-type factors."""
    omega = rpm * 2 * math.pi / 60
    flute_factor = 1.0 + (tool.effective_flutes() - 2) * 0.05
    cut_factor = cfg.power.cut_torque_factors.get(cut_type, 1.0)
    return SpindleTorque(
        omega_rad_s=omega,
        base_torque_nm=power_w / omega,
        torque_factor=flute_factor * cut_factor,
    )


# === THERMAL ===

@dataclass(frozen=True)
class ThermalReport:
    heat_generation_w: float
    effective_tool_heat_w: float
    tool_thermal_limit_w: float
    material_conductivity_w_mk: float
    coolant: bool
    coolant_recommended: bool

    @property
    def thermal_utilization_percent(self) -> float:
        return self.effective_tool_heat_w / self.tool_thermal_limit_w * 100


def tool_thermal_limit_w(tool: Tool, cfg: MachiningConfig = default_config) -> float:
    """Heat the tool can shed: cross-section area x capacity per mm^2."""
    diameter = tool.effective_diameter()
    return math.pi * diameter**2 / 4 * cfg.power.tool_thermal_capacity_w_mm2


def thermal_effects(
    power_w: float,
    material: Material,
    tool: Tool,
    coolant: bool = False,
    cfg: MachiningConfig = default_config,
) -> ThermalReport:
    """
    Estimate how much cutting heat ends up in the tool.

        Q        = 0.85 x P
        Q_tool   = Q x 0.2 (x 0.3 with coolant)
        Q_limit  = pi d^2 / 4 x 0.5 W/mm^2

    Coolant is recommended once Q_tool exceeds 60% of Q_limit.
    """
    params = cfg.power
    heat = power_w * params.heat_fraction
    coolant_factor = params.coolant_heat_factor if coolant else 1.0
    conductivity = material.thermal_conductivity
    if conductivity is None:
        conductivity = params.default_thermal_conductivity
    tool_heat = heat * coolant_factor * params.tool_heat_fraction
    limit = tool_thermal_limit_w(tool, cfg)
    return ThermalReport(
        heat_generation_w=heat,
        effective_tool_heat_w=tool_heat,
        tool_thermal_limit_w=limit,
        material_conductivity_w_mk=conductivity,
        coolant=coolant,
        coolant_recommended=tool_heat > limit * params.coolant_recommend_fraction,
    )
