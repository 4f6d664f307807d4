"""Diagnostic accumulation and threshold checks."""

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

import pytest  # noqa: E402


class TestDiagnosticLog:
    def test_entries_keep_detection_order_without_dedup(self):
        from core.diagnostics import DiagnosticLog, Severity

        log = DiagnosticLog()
        log.warning("Feed limited by machine")
        log.info("Chip thinning compensation applied")
        log.warning("Feed limited by machine")

        assert [w.message for w in log.entries] == [
            "Feed limited by machine",
            "Chip thinning compensation applied",
            "Feed limited by machine",
        ]
        assert log.messages(Severity.INFO) == ["Chip thinning compensation applied"]

    def test_entries_snapshot_is_immutable(self):
        from core.diagnostics import DiagnosticLog

        log = DiagnosticLog()
        log.danger("x")
        snapshot = log.entries
        log.info("y")

        assert isinstance(snapshot, tuple)
        assert len(snapshot) == 1
        assert len(log) == 2

    def test_warning_dict_round_trip(self):
        from core.diagnostics import CuttingWarning, Severity

        warning = CuttingWarning(Severity.DANGER, "High deflection: 0.716mm")
        assert warning.to_dict() == {"severity": "danger", "message": "High deflection: 0.716mm"}
        assert CuttingWarning.from_dict(warning.to_dict()) == warning


class TestDeflectionCheck:
    @pytest.mark.parametrize(
        "deflection, expected",
        [
            (0.01, []),
            (0.02, [("warning", "Moderate deflection: 0.020mm")]),
            (0.049, [("warning", "Moderate deflection: 0.049mm")]),
            (0.05, [("danger", "High deflection: 0.050mm")]),
            (0.7154, [("danger", "High deflection: 0.715mm")]),
        ],
    )
    def test_thresholds(self, deflection, expected):
        from core.diagnostics import DiagnosticLog, check_deflection

        log = DiagnosticLog()
        check_deflection(deflection, log)
        assert [(w.severity.value, w.message) for w in log] == expected


class TestChipLoadCheck:
    RANGE = (0.02, 0.05)

    def test_rubbing(self):
        from core.diagnostics import DiagnosticLog, Severity, check_chip_load

        log = DiagnosticLog()
        check_chip_load(0.009, self.RANGE, "endmill_flat", log)
        assert log.messages(Severity.DANGER) == ["Chipload too low - rubbing risk"]

    @pytest.mark.parametrize("tool_type", ["drill", "boring"])
    def test_rubbing_exemptions(self, tool_type):
        from core.diagnostics import DiagnosticLog, check_chip_load

        log = DiagnosticLog()
        check_chip_load(0.001, self.RANGE, tool_type, log)
        assert len(log) == 0

    def test_overload(self):
        from core.diagnostics import DiagnosticLog, Severity, check_chip_load

        log = DiagnosticLog()
        check_chip_load(0.08, self.RANGE, "endmill_flat", log)
        assert log.messages(Severity.WARNING) == ["Chipload very high - check tool strength"]

    def test_in_band_is_silent(self):
        from core.diagnostics import DiagnosticLog, check_chip_load

        log = DiagnosticLog()
        check_chip_load(0.03, self.RANGE, "endmill_flat", log)
        assert len(log) == 0


class TestToolHeuristics:
    @pytest.mark.parametrize(
        "kwargs, message",
        [
            (dict(tool_type="vbit", diameter_mm=4.0, ap_mm=2.5, feed_mm_min=100,
                  force_n=1, user_doc_mm=None),
             "Deep V-carve - consider multiple passes"),
            (dict(tool_type="slitting", diameter_mm=63.0, ap_mm=1, feed_mm_min=600,
                  force_n=1, user_doc_mm=None),
             "High feed for slitting saw - watch for blade flex"),
            (dict(tool_type="boring", diameter_mm=20.0, ap_mm=1, feed_mm_min=100,
                  force_n=150, user_doc_mm=None),
             "High boring force - check bar rigidity"),
            (dict(tool_type="endmill_flat", diameter_mm=0.8, ap_mm=0.5, feed_mm_min=100,
                  force_n=12, user_doc_mm=None),
             "Small tool - risk of breakage"),
            (dict(tool_type="endmill_flat", diameter_mm=6.0, ap_mm=13, feed_mm_min=100,
                  force_n=1, user_doc_mm=13.0),
             "Very deep DOC - ensure adequate chip evacuation"),
        ],
    )
    def test_rule_fires(self, kwargs, message):
        from core.diagnostics import DiagnosticLog, check_tool_heuristics

        log = DiagnosticLog()
        check_tool_heuristics(log=log, **kwargs)
        assert log.messages() == [message]

    def test_ordinary_cut_is_silent(self):
        from core.diagnostics import DiagnosticLog, check_tool_heuristics

        log = DiagnosticLog()
        check_tool_heuristics("endmill_flat", 6.0, 3.0, 1000, 40, None, log)
        assert len(log) == 0
