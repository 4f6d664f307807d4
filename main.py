#!/usr/bin/env python3
"""
JustTheChip: Main Entry Point
=============================

Usage:
    python main.py --list                                 Show catalog keys
    python main.py --material al_6061_t6 --cut profile    Recommend parameters
    python main.py --settings job.json --csv out.csv      Run a saved job
    python main.py --validate                             Run formula regressions
    python main.py --check-config                         Validate configuration

"""

import argparse
import logging
import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from config import config  # noqa: E402
from core.catalog import CatalogError, load_default_catalog  # noqa: E402
from core.diagnostics import Severity  # noqa: E402
from core.export import (  # noqa: E402
    SettingsError,
    export_settings,
    import_settings,
    merge_with_defaults,
    results_to_csv,
    results_to_json,
    spindle_from_settings,
)
from core.solver import SpeedsFeedsSolver  # noqa: E402
from core.tools import tool_from_dict  # noqa: E402
from core.validation import validate_results  # noqa: E402

SEVERITY_TAGS = {
    Severity.INFO: "[i]",
    Severity.WARNING: "[!]",
    Severity.DANGER: "[X]",
}


def validate_config() -> bool:
    """Validate solver configuration."""
    print("Validating configuration...")
    errors = config.validate()

    if errors:
        print("\nCONFIGURATION ERRORS:")
        for err in errors:
            print(f"  [!] {err}")
        return False

    print("  Configuration valid.")
    return True


def validate_formulas() -> bool:
    """Run the reference formula cases against handbook ranges."""
    from core.regression import RegressionRunner

    print("\n--- Validating Formulas ---")
    report_dir = project_root / "output" / "reports"

    runner = RegressionRunner()
    passed, current, failures = runner.check(report_dir=report_dir)

    for name, metrics in current.items():
        print(
            f"  {name}: {metrics['power_w']:.2f} W, "
            f"{metrics['force_n']:.2f} N, {metrics['deflection_mm']:.4f} mm"
        )

    if passed:
        print("  Formula regressions PASSED")
    else:
        print("  Formula regressions FAILED:")
        for failure in failures:
            print(f"   - {failure}")
    return passed


def list_catalog(catalog) -> None:
    """Print every selectable catalog key."""
    print("\nMachines:")
    for key, machine in catalog.machines.items():
        print(f"  {key:<18} {machine.name}")
    print("\nSpindles:")
    for key, spindle in catalog.spindles.items():
        print(f"  {key:<18} {spindle.name} ({spindle.rated_power_kw} kW, "
              f"{spindle.rpm_min:.0f}-{spindle.rpm_max:.0f} rpm)")
    print("\nTool types:")
    for key, tool_type in catalog.tool_types.items():
        print(f"  {key:<18} {tool_type.name}")
    print("\nMaterials:")
    for key, material in catalog.materials.items():
        print(f"  {key:<18} {material.name}")
    print("\nCut types:")
    for key, cut in catalog.cut_types.items():
        print(f"  {key:<18} {cut.name}")


def settings_from_args(args) -> dict:
    """Translate CLI flags into the settings-file shape."""
    tool = {"type": args.tool_type}
    geometry = {
        # Aliases cover the per-variant field names; unknown keys are ignored
        "diameter_mm": args.diameter,
        "min_bore_diameter_mm": args.diameter,
        "flutes": args.flutes,
        "insert_count": args.flutes,
        "teeth": args.flutes,
        "angle_deg": args.angle,
        "taper_angle_deg": args.angle,
        "tip_diameter_mm": args.tip_diameter,
        "stickout_mm": args.stickout,
        "shank_mm": args.shank,
        "material": args.tool_material,
        "coating": args.coating,
        "holder": args.holder,
    }
    tool.update({k: v for k, v in geometry.items() if v is not None})

    settings = {
        "machine": args.machine,
        "spindle": args.spindle,
        "tool": tool,
        "materials": args.material or ["al_6061_t6"],
        "cut_types": args.cut or ["profile"],
        "aggressiveness": args.aggressiveness,
        "custom_doc": {"enabled": args.doc is not None, "value": args.doc or 1.0},
    }
    return settings


def print_result(result, machine=None) -> None:
    print(f"\n=== {result.material_key} / {result.cut_type} "
          f"({result.tool_type}, {result.effective_diameter_mm:.2f} mm) ===")
    print(f"  RPM:         {result.rpm:.0f}  ({result.surface_speed_m_min:.0f} m/min, "
          f"{result.sfm:.0f} SFM)")
    print(f"  Feed:        {result.feed_mm_min:.0f} mm/min")
    print(f"  Chipload:    {result.chip_load_mm:.4f} mm/tooth")
    doc_note = " (user)" if result.user_doc_override else ""
    print(f"  WOC / DOC:   {result.ae_mm:.2f} / {result.ap_mm:.2f} mm{doc_note}")
    print(f"  MRR:         {result.mrr_mm3_min:.0f} mm³/min")
    print(f"  Power:       {result.power_required_w:.0f} W of "
          f"{result.power_available_w:.0f} W available")
    print(f"  Force:       {result.cutting_force_n:.1f} N")
    print(f"  Deflection:  {result.deflection_mm:.4f} mm")
    for warning in result.warnings:
        print(f"  {SEVERITY_TAGS[warning.severity]} {warning.message}")

    check = validate_results(result, machine)
    print(f"  Status:      {check.status}")
    for recommendation in check.recommendations:
        print(f"    - {recommendation}")


def run_calculations(args) -> int:
    catalog = load_default_catalog()
    solver = SpeedsFeedsSolver(catalog)

    if args.settings:
        settings = merge_with_defaults(import_settings(Path(args.settings)))
        if args.material:
            settings["materials"] = args.material
        if args.cut:
            settings["cut_types"] = args.cut
    else:
        settings = settings_from_args(args)

    if args.save_settings:
        path = export_settings(settings, Path(args.save_settings))
        print(f"  Settings written to: {path}")

    machine = catalog.machine(settings["machine"])
    spindle = spindle_from_settings(settings["spindle"], catalog)
    try:
        tool = tool_from_dict(settings["tool"])
    except ValueError as exc:
        raise SettingsError(str(exc)) from exc

    custom_doc = settings.get("custom_doc") or {}
    user_doc = float(custom_doc["value"]) if custom_doc.get("enabled") else None

    entries = solver.calculate_matrix(
        machine,
        spindle,
        tool,
        settings["materials"],
        settings["cut_types"],
        aggressiveness=float(settings.get("aggressiveness", 1.0)),
        user_doc_mm=user_doc,
        max_workers=args.workers,
    )

    results = []
    for entry in entries:
        if not entry.ok:
            print(f"\n=== {entry.material_key} / {entry.cut_type} ===")
            for err in entry.errors:
                print(f"  [X] {err}")
            continue
        print_result(entry.result, machine)
        results.append(entry.result)

    if args.json:
        json_path = Path(args.json)
        json_path.parent.mkdir(parents=True, exist_ok=True)
        json_path.write_text(results_to_json(results), encoding="utf-8")
        print(f"\n  JSON written to: {json_path}")

    if args.csv:
        csv_path = results_to_csv(results, Path(args.csv))
        print(f"  CSV written to: {csv_path}")

    return 0 if len(results) == len(entries) else 1


def main():
    parser = argparse.ArgumentParser(description="JustTheChip speeds & feeds calculator")
    parser.add_argument("--list", action="store_true", help="List catalog presets")
    parser.add_argument("--machine", default="printnc", help="Machine preset key")
    parser.add_argument("--spindle", default="water_2_2kw", help="Spindle preset key")
    parser.add_argument("--tool-type", default="endmill_flat", help="Tool type key")
    parser.add_argument("--diameter", type=float, default=6.0, help="Tool diameter (mm)")
    parser.add_argument("--flutes", type=int, help="Flutes / inserts / teeth")
    parser.add_argument("--angle", type=float, help="Included or taper angle (deg)")
    parser.add_argument("--tip-diameter", type=float, help="Tip diameter (mm)")
    parser.add_argument("--stickout", type=float, help="Tool stickout (mm)")
    parser.add_argument("--shank", type=float, help="Shank diameter (mm)")
    parser.add_argument("--tool-material", help="Tool substrate (carbide, hss, ...)")
    parser.add_argument("--coating", help="Tool coating (uncoated, tialn, ...)")
    parser.add_argument("--holder", help="Holder type (collet, shrink_fit, ...)")
    parser.add_argument("--material", action="append", help="Material key (repeatable)")
    parser.add_argument("--cut", action="append", help="Cut type key (repeatable)")
    parser.add_argument("--aggressiveness", type=float, default=1.0,
                        help="Aggressiveness multiplier (0.1-3.0)")
    parser.add_argument("--doc", type=float, help="Override depth of cut (mm)")
    parser.add_argument("--workers", type=int, help="Thread pool size for the matrix")
    parser.add_argument("--settings", help="Load a settings JSON file")
    parser.add_argument("--save-settings", help="Write the effective settings to JSON")
    parser.add_argument("--json", help="Write results as JSON")
    parser.add_argument("--csv", help="Write results as CSV")
    parser.add_argument(
        "--validate", action="store_true", help="Run reference formula regressions"
    )
    parser.add_argument(
        "--check-config", action="store_true", help="Validate configuration only"
    )
    parser.add_argument(
        "--summary", action="store_true", help="Show configuration summary"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    print(f"{config.project_name} v{config.version}")

    if args.summary:
        print(config.summary())
        return 0

    if args.check_config:
        return 0 if validate_config() else 1

    if args.validate:
        return 0 if validate_formulas() else 1

    if args.list:
        list_catalog(load_default_catalog())
        return 0

    if not validate_config():
        print("\nAborting due to configuration errors.")
        return 1

    try:
        return run_calculations(args)
    except (CatalogError, SettingsError) as exc:
        print(f"  [X] {exc}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
