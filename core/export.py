"""
JustTheChip: Settings & Results Export
======================================

File-level persistence around the solver. Nothing here changes numerics;
it only moves request and result shapes to and from disk.

Files produced:
    settings JSON    {version, timestamp, machine, spindle, tool, ...}
    results JSON     {version, timestamp, results: [CalculationResult.to_dict()]}
    results CSV      one row per material x cut-type combination
    autosave JSON    settings envelope, ignored once stale
"""

from __future__ import annotations

import copy
import csv
import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from config import config as default_config
from config.machining_config import MachiningConfig
from .catalog import Catalog
from .models import CalculationRequest, CalculationResult, Spindle
from .tools import tool_from_dict

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Material",
    "Cut Type",
    "Tool Type",
    "Tool Diameter (mm)",
    "RPM",
    "Feed Rate (mm/min)",
    "Chipload (mm/tooth)",
    "WOC (mm)",
    "DOC (mm)",
    "MRR (mm³/min)",
    "Power Required (W)",
    "Cutting Force (N)",
    "Tool Deflection (mm)",
    "Warnings",
]

NESTED_SETTINGS_KEYS = ("spindle", "tool", "custom_doc")


class SettingsError(ValueError):
    """Settings file that cannot be used."""


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_timestamp(value: str) -> datetime:
    stamp = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp


# === SETTINGS ===

def default_settings(cfg: MachiningConfig = default_config) -> Dict[str, Any]:
    return {
        "version": cfg.export.settings_version,
        "machine": "printnc",
        "spindle": {
            "name": "Custom Spindle",
            "rated_power_kw": 2.2,
            "rpm_min": 8000,
            "rpm_max": 24000,
            "base_rpm": 12000,
        },
        "tool": {
            "type": "endmill_flat",
            "diameter_mm": 6,
            "flutes": 4,
            "stickout_mm": 25,
            "shank_mm": 6,
        },
        "materials": ["al_6061_t6"],
        "cut_types": ["profile"],
        "aggressiveness": 1.0,
        "custom_doc": {"enabled": False, "value": 1.0},
    }


def merge_with_defaults(
    imported: Mapping[str, Any], defaults: Optional[Mapping[str, Any]] = None
) -> Dict[str, Any]:
    """Shallow merge, except the nested records which merge key by key."""
    defaults = default_settings() if defaults is None else defaults
    merged = {**copy.deepcopy(dict(defaults)), **copy.deepcopy(dict(imported))}
    for key in NESTED_SETTINGS_KEYS:
        base = defaults.get(key)
        override = imported.get(key)
        if isinstance(base, Mapping) and isinstance(override, Mapping):
            merged[key] = {**base, **override}
    return merged


def validate_settings_structure(
    settings: Any, cfg: MachiningConfig = default_config
) -> None:
    if not isinstance(settings, dict):
        raise SettingsError("Invalid settings file structure: expected an object")

    required = cfg.export.required_settings_keys
    if not any(key in settings for key in required):
        raise SettingsError(
            f"Invalid settings file structure: needs one of {', '.join(required)}"
        )
    if "machine" in settings and not isinstance(settings["machine"], str):
        raise SettingsError("Invalid settings file structure: machine must be a preset key")
    if "spindle" in settings and not isinstance(settings["spindle"], (str, dict)):
        raise SettingsError("Invalid settings file structure: spindle must be a key or object")
    if "tool" in settings and not isinstance(settings["tool"], dict):
        raise SettingsError("Invalid settings file structure: tool must be an object")


def export_settings(
    settings: Mapping[str, Any], path: Path, cfg: MachiningConfig = default_config
) -> Path:
    data = {
        "version": cfg.export.settings_version,
        "timestamp": _timestamp(),
        **settings,
    }
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    logger.info(f"Settings written to {path}")
    return path


def import_settings(path: Path, cfg: MachiningConfig = default_config) -> Dict[str, Any]:
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            settings = json.load(f)
    except json.JSONDecodeError as exc:
        raise SettingsError(f"Invalid JSON file: {exc}") from exc
    except OSError as exc:
        raise SettingsError(f"Failed to read settings file: {exc}") from exc

    validate_settings_structure(settings, cfg)
    logger.info(f"Settings loaded from {path}")
    return settings


def spindle_from_settings(value: Any, catalog: Catalog) -> Spindle:
    if isinstance(value, str):
        return catalog.spindle(value)
    try:
        return Spindle(
            name=value.get("name", "Custom Spindle"),
            rated_power_kw=float(value["rated_power_kw"]),
            rpm_min=float(value["rpm_min"]),
            rpm_max=float(value["rpm_max"]),
            base_rpm=float(value["base_rpm"]),
            cooling=value.get("cooling", ""),
        )
    except (KeyError, TypeError) as exc:
        raise SettingsError(f"Incomplete spindle definition: {exc}") from exc


def build_requests(
    settings: Mapping[str, Any], catalog: Catalog
) -> List[CalculationRequest]:
    """
    Expand settings into one request per material x cut type.

    Raises CatalogError for unknown machine/spindle/material keys and
    SettingsError for an unusable tool or spindle record.
    """
    settings = merge_with_defaults(settings)
    machine = catalog.machine(settings["machine"])
    spindle = spindle_from_settings(settings["spindle"], catalog)
    try:
        tool = tool_from_dict(settings["tool"])
    except ValueError as exc:
        raise SettingsError(str(exc)) from exc

    custom_doc = settings.get("custom_doc") or {}
    user_doc = float(custom_doc["value"]) if custom_doc.get("enabled") else None
    aggressiveness = float(settings.get("aggressiveness", 1.0))

    return [
        CalculationRequest(
            machine=machine,
            spindle=spindle,
            tool=tool,
            material=catalog.material(material_key),
            cut_type=cut_type,
            aggressiveness=aggressiveness,
            user_doc_mm=user_doc,
        )
        for material_key in settings.get("materials", [])
        for cut_type in settings.get("cut_types", [])
    ]


# === RESULTS ===

def results_to_json(
    results: Iterable[CalculationResult], cfg: MachiningConfig = default_config
) -> str:
    payload = {
        "version": cfg.export.settings_version,
        "timestamp": _timestamp(),
        "results": [r.to_dict() for r in results],
    }
    return json.dumps(payload, indent=2)


def results_from_json(text: str) -> List[CalculationResult]:
    payload = json.loads(text)
    if not isinstance(payload, dict) or "results" not in payload:
        raise SettingsError("Invalid results file structure")
    return [CalculationResult.from_dict(r) for r in payload["results"]]


def result_row(result: CalculationResult) -> List[Any]:
    return [
        result.material_key,
        result.cut_type,
        result.tool_type,
        result.effective_diameter_mm,
        round(result.rpm),
        round(result.feed_mm_min),
        round(result.chip_load_mm, 4),
        round(result.ae_mm, 2),
        round(result.ap_mm, 2),
        round(result.mrr_mm3_min),
        round(result.power_required_w),
        round(result.cutting_force_n, 1),
        round(result.deflection_mm, 4),
        "; ".join(w.message for w in result.warnings),
    ]


def results_to_csv(results: Iterable[CalculationResult], path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = [result_row(r) for r in results]
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, quoting=csv.QUOTE_ALL)
        writer.writerow(CSV_HEADERS)
        writer.writerows(rows)
    logger.info(f"Wrote {len(rows)} result rows to {path}")
    return path


def format_results_text(results: Iterable[CalculationResult]) -> str:
    """Plain-text block, one section per result."""
    blocks = []
    for r in results:
        lines = [
            f"Material: {r.material_key}",
            f"Cut Type: {r.cut_type}",
            f"RPM: {r.rpm:.0f}",
            f"Feed: {r.feed_mm_min:.0f} mm/min",
            f"Chipload: {r.chip_load_mm:.4f} mm/tooth",
            f"Power: {r.power_required_w:.0f} W",
            f"Deflection: {r.deflection_mm:.4f} mm",
        ]
        if r.warnings:
            lines.append("Warnings: " + ", ".join(w.message for w in r.warnings))
        lines.append("---")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


# === AUTOSAVE ===

def autosave(settings: Mapping[str, Any], path: Path) -> Path:
    data = {**settings, "timestamp": _timestamp()}
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    logger.debug(f"Autosaved settings to {path}")
    return path


def load_autosave(
    path: Path,
    max_age_days: Optional[float] = None,
    now: Optional[datetime] = None,
    cfg: MachiningConfig = default_config,
) -> Optional[Dict[str, Any]]:
    """Saved settings, or None when missing, unreadable or stale."""
    path = Path(path)
    if not path.exists():
        return None

    max_age = cfg.export.autosave_max_age_days if max_age_days is None else max_age_days
    try:
        with open(path, "r", encoding="utf-8") as f:
            settings = json.load(f)
        saved_at = _parse_timestamp(settings["timestamp"])
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
        logger.warning(f"Ignoring unreadable autosave {path}: {exc}")
        return None

    now = now or datetime.now(timezone.utc)
    if now - saved_at > timedelta(days=max_age):
        logger.info(f"Autosave {path} is older than {max_age} days; ignoring")
        return None
    return settings
