"""
JustTheChip: Diagnostics
========================

Categorized advisory warnings produced while solving a cutting operation.

A DiagnosticLog is created per calculation and handed to every pipeline
stage; stages append in detection order and nothing is ever deduplicated.
The checks at the bottom of this module are the aggregator that runs once the
numeric stages have finished. None of them abort the calculation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

from config import config as default_config
from config.machining_config import MachiningConfig


class Severity(Enum):
    """Display category for a diagnostic."""
    INFO = "info"
    WARNING = "warning"
    DANGER = "danger"


@dataclass(frozen=True)
class CuttingWarning:
    """A single advisory message."""

    severity: Severity
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"severity": self.severity.value, "message": self.message}

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "CuttingWarning":
        return cls(severity=Severity(data["severity"]), message=data["message"])


class DiagnosticLog:
    """Append-only warning accumulator threaded through the solver stages."""

    def __init__(self) -> None:
        self._entries: List[CuttingWarning] = []

    def add(self, severity: Severity, message: str) -> None:
        self._entries.append(CuttingWarning(severity, message))

    def info(self, message: str) -> None:
        self.add(Severity.INFO, message)

    def warning(self, message: str) -> None:
        self.add(Severity.WARNING, message)

    def danger(self, message: str) -> None:
        self.add(Severity.DANGER, message)

    @property
    def entries(self) -> Tuple[CuttingWarning, ...]:
        return tuple(self._entries)

    def messages(self, severity: Optional[Severity] = None) -> List[str]:
        return [w.message for w in self._entries
                if severity is None or w.severity == severity]

    def __iter__(self) -> Iterator[CuttingWarning]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


# === AGGREGATOR CHECKS ===

def check_deflection(
    deflection_mm: float,
    log: DiagnosticLog,
    cfg: MachiningConfig = default_config,
) -> None:
    """Flag deflection at or above the warning/danger thresholds."""
    params = cfg.deflection
    if deflection_mm >= params.danger_mm:
        log.danger(f"High deflection: {deflection_mm:.3f}mm")
    elif deflection_mm >= params.warning_mm:
        log.warning(f"Moderate deflection: {deflection_mm:.3f}mm")


def check_chip_load(
    chip_load_mm: float,
    chip_load_range: Tuple[float, float],
    tool_type: str,
    log: DiagnosticLog,
    cfg: MachiningConfig = default_config,
) -> None:
    """Compare the effective chip load against the material table band."""
    params = cfg.diagnostics
    low, high = chip_load_range

    # Drills and boring bars cut on the point/insert and do not rub the same way
    if (tool_type not in params.rubbing_exempt_tools
            and chip_load_mm < low * params.rubbing_fraction):
        log.danger("Chipload too low - rubbing risk")

    if chip_load_mm > high * params.overload_fraction:
        log.warning("Chipload very high - check tool strength")


def check_tool_heuristics(
    tool_type: str,
    diameter_mm: float,
    ap_mm: float,
    feed_mm_min: float,
    force_n: float,
    user_doc_mm: Optional[float],
    log: DiagnosticLog,
    cfg: MachiningConfig = default_config,
) -> None:
    """Tool-specific rules of thumb."""
    params = cfg.diagnostics

    if tool_type == "vbit" and ap_mm > diameter_mm * params.deep_vcarve_fraction:
        log.warning("Deep V-carve - consider multiple passes")

    if tool_type == "slitting" and feed_mm_min > params.slitting_feed_limit:
        log.warning("High feed for slitting saw - watch for blade flex")

    if tool_type == "boring" and force_n > params.boring_force_limit:
        log.warning("High boring force - check bar rigidity")

    if diameter_mm < params.small_tool_diameter and force_n > params.small_tool_force_limit:
        log.warning("Small tool - risk of breakage")

    if user_doc_mm is not None and user_doc_mm > diameter_mm * params.deep_doc_multiple:
        log.warning("Very deep DOC - ensure adequate chip evacuation")
