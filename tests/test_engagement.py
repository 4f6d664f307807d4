"""
Engagement Resolution
=====================

Radial (ae) and axial (ap) engagement per tool variant:

  Drill:   ae = D,                        ap = 0.5 D
  V-bit:   depth = tip + 2 mm,            ae = 2 depth tan(angle/2), ap = depth
  Others:  ae = min(D mid(ae), D max_radial) x radial aggressiveness
           ap = min(D mid(ap), D max_axial)  x axial aggressiveness
           slot fixes ae = D

Values below use the bundled aluminium 6061 table (profile: ae [0.2, 0.4],
ap [1.0, 1.5], max radial 0.35 D, max axial 1.5 D).
"""

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

import pytest  # noqa: E402


def _setup(machine_key="printnc", material_key="al_6061_t6"):
    from core.catalog import load_default_catalog

    catalog = load_default_catalog()
    return catalog, catalog.material(material_key), catalog.machine(machine_key)


class TestToolSpecificEngagement:
    """Drills and V-bits bypass the cut-type table."""

    def test_drill_full_diameter_half_deep(self):
        from core.engagement import resolve_engagement
        from core.tools import Drill

        catalog, material, machine = _setup()
        result = resolve_engagement(
            Drill(diameter_mm=8), material, catalog.cut_definition("drilling"), machine
        )

        assert result.ae_mm == 8
        assert result.ap_mm == pytest.approx(4.0)

    def test_vbit_sized_from_assumed_depth(self):
        """90 deg V-bit, sharp tip: depth 2 mm, ae = 2 x 2 x tan(45) = 4 mm."""
        from core.engagement import resolve_engagement
        from core.tools import VBit

        catalog, material, machine = _setup()
        result = resolve_engagement(
            VBit(angle_deg=90), material, catalog.cut_definition("vcarve"), machine
        )

        assert result.ae_mm == pytest.approx(4.0)
        assert result.ap_mm == pytest.approx(2.0)

    def test_vbit_tip_diameter_deepens_cut(self):
        from core.engagement import resolve_engagement
        from core.tools import VBit

        catalog, material, machine = _setup()
        result = resolve_engagement(
            VBit(angle_deg=60, tip_diameter_mm=0.5), material,
            catalog.cut_definition("vcarve"), machine,
        )

        assert result.ap_mm == pytest.approx(2.5)
        assert result.ae_mm == pytest.approx(2 * 2.5 * 0.5773502691896257)


class TestCutTableEngagement:
    DIAMETER = 6.0

    def test_profile_uses_cut_midpoint(self):
        """ae = min(6 x 0.3, 6 x 0.35) = 1.8; ap = min(6 x 1.25, 6 x 1.5) = 7.5."""
        from core.engagement import resolve_engagement
        from core.tools import FlatEndMill

        catalog, material, machine = _setup()
        result = resolve_engagement(
            FlatEndMill(diameter_mm=self.DIAMETER), material,
            catalog.cut_definition("profile"), machine,
        )

        assert result.ae_mm == pytest.approx(1.8)
        assert result.ap_mm == pytest.approx(7.5)
        assert result.max_ap_mm == pytest.approx(9.0)
        assert not result.user_override

    def test_material_limit_caps_engagement(self):
        """Titanium profile: max radial 0.10 D caps ae at 0.6 mm, max axial 0.3 D caps ap."""
        from core.engagement import resolve_engagement
        from core.tools import FlatEndMill

        catalog, material, machine = _setup(material_key="titanium")
        result = resolve_engagement(
            FlatEndMill(diameter_mm=self.DIAMETER), material,
            catalog.cut_definition("profile"), machine,
        )

        assert result.ae_mm == pytest.approx(0.6)
        assert result.ap_mm == pytest.approx(1.8)

    def test_slot_is_full_width(self):
        from core.engagement import resolve_engagement
        from core.tools import FlatEndMill

        catalog, material, machine = _setup()
        result = resolve_engagement(
            FlatEndMill(diameter_mm=self.DIAMETER), material,
            catalog.cut_definition("slot"), machine,
        )

        assert result.ae_mm == self.DIAMETER
        assert result.ap_mm == pytest.approx(5.4)

    def test_machine_aggressiveness_scales_engagement(self):
        """Light hobby machine runs 0.6 radial / 0.6 axial."""
        from core.engagement import resolve_engagement
        from core.tools import FlatEndMill

        catalog, material, machine = _setup(machine_key="light_hobby")
        result = resolve_engagement(
            FlatEndMill(diameter_mm=self.DIAMETER), material,
            catalog.cut_definition("profile"), machine,
        )

        assert result.ae_mm == pytest.approx(1.08)
        assert result.ap_mm == pytest.approx(4.5)

    def test_unknown_cut_defaults_to_full_engagement(self):
        from core.engagement import resolve_engagement
        from core.tools import FlatEndMill

        catalog, material, machine = _setup()
        result = resolve_engagement(
            FlatEndMill(diameter_mm=self.DIAMETER), material,
            catalog.cut_definition("not_a_cut"), machine,
        )

        assert result.ae_mm == pytest.approx(self.DIAMETER)
        assert result.ap_mm == pytest.approx(self.DIAMETER)


class TestUserDepthOfCut:
    def test_user_doc_replaces_axial_depth(self):
        from core.diagnostics import DiagnosticLog
        from core.engagement import resolve_engagement
        from core.tools import FlatEndMill

        catalog, material, machine = _setup()
        log = DiagnosticLog()
        result = resolve_engagement(
            FlatEndMill(diameter_mm=6), material, catalog.cut_definition("profile"),
            machine, user_doc_mm=2.0, log=log,
        )

        assert result.ap_mm == 2.0
        assert result.user_override
        assert len(log) == 0

    def test_excessive_user_doc_warns_but_is_kept(self):
        from core.diagnostics import DiagnosticLog, Severity
        from core.engagement import resolve_engagement
        from core.tools import FlatEndMill

        catalog, material, machine = _setup()
        log = DiagnosticLog()
        result = resolve_engagement(
            FlatEndMill(diameter_mm=6), material, catalog.cut_definition("profile"),
            machine, user_doc_mm=10.0, log=log,
        )

        assert result.ap_mm == 10.0
        assert log.messages(Severity.WARNING) == [
            "User DOC (10.00mm) exceeds recommended maximum (9.00mm)"
        ]
