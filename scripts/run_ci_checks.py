"""CI entrypoint for JustTheChip.

Runs config validation, checks the bundled catalog, and the formula regressions.
"""
# ruff: noqa: E402
from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from config import config
from core.catalog import load_default_catalog
from core.regression import RegressionRunner
from core.validation import validate_machine, validate_material, validate_spindle


def run_config_validation() -> int:
    errors = config.validate()
    if errors:
        print("Configuration validation failed:")
        for err in errors:
            print(f" - {err}")
        return 1

    print("Configuration validation passed.")
    return 0


def run_catalog_validation() -> int:
    catalog = load_default_catalog()
    errors = []
    for key, machine in catalog.machines.items():
        errors.extend(f"machine {key}: {e}" for e in validate_machine(machine).errors)
    for key, spindle in catalog.spindles.items():
        errors.extend(f"spindle {key}: {e}" for e in validate_spindle(spindle).errors)
    for key, material in catalog.materials.items():
        errors.extend(f"material {key}: {e}" for e in validate_material(material).errors)

    if errors:
        print("Catalog validation failed:")
        for err in errors:
            print(f" - {err}")
        return 1

    print(f"Catalog validation passed ({len(catalog.materials)} materials, "
          f"{len(catalog.spindles)} spindles, {len(catalog.machines)} machines).")
    return 0


def run_formula_regressions() -> int:
    passed, _, failures = RegressionRunner().check(
        report_dir=PROJECT_ROOT / "output" / "reports"
    )
    if not passed:
        print("Formula regressions failed:")
        for failure in failures:
            print(f" - {failure}")
        return 1

    print("Formula regressions passed.")
    return 0


def main() -> int:
    exit_codes = [run_config_validation()]
    exit_codes.append(run_catalog_validation())
    exit_codes.append(run_formula_regressions())

    return 1 if any(code != 0 for code in exit_codes) else 0


if __name__ == "__main__":
    sys.exit(main())
