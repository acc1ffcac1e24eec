"""Tests for failure classification and fix suggestions."""

import time

import pytest

from pipeline_healer.analyzer import FailureAnalyzer
from pipeline_healer.catalog import Catalog
from pipeline_healer.config import SelfHealingOptions
from pipeline_healer.models import SEVERITY_RANK, DetectedFailure, FailureSeverity, FailureType


@pytest.fixture
def analyzer() -> FailureAnalyzer:
    return FailureAnalyzer(SelfHealingOptions(platform="github"))


def _failure(failure_type: FailureType, severity: FailureSeverity) -> DetectedFailure:
    return DetectedFailure(
        type=failure_type,
        severity=severity,
        message="boom",
        matched_pattern="boom",
        description="test failure",
    )


def _build_catalog(fix_count: int) -> Catalog:
    """Catalog with a single build rule and ``fix_count`` build fixes."""
    return Catalog.from_tables(
        common_patterns=[{
            "type": FailureType.BUILD,
            "severity": FailureSeverity.HIGH,
            "patterns": [r"boom"],
            "description": "Boom",
        }],
        platform_patterns={},
        common_fixes=[
            {"type": FailureType.BUILD, "description": f"Fix {i}", "manual_steps": ["Do it"]}
            for i in range(fix_count)
        ],
        platform_fixes={},
    )


class TestAnalyzeFailure:
    """Tests for FailureAnalyzer.analyze_failure."""

    def test_detects_test_failures(self, analyzer, jest_log):
        """A Jest run with a failing suite is a medium test failure."""
        failures = analyzer.analyze_failure(jest_log)

        assert failures
        assert failures[0].type == FailureType.TEST
        assert failures[0].severity == FailureSeverity.MEDIUM

    def test_single_jest_marker_yields_one_failure(self, analyzer):
        log = "FAIL src/x.test.js ... expect(fn()).toHaveBeenCalledTimes(1)"

        failures = analyzer.analyze_failure(log)

        assert len(failures) == 1
        assert failures[0].type == FailureType.TEST
        assert failures[0].severity == FailureSeverity.MEDIUM
        assert "FAIL src/x.test.js" in failures[0].message
        assert failures[0].location is None

    def test_detects_dependency_issues(self, analyzer, npm_log):
        failures = analyzer.analyze_failure(npm_log)

        assert failures[0].type == FailureType.DEPENDENCY
        assert failures[0].severity == FailureSeverity.HIGH

    def test_detects_resource_constraints(self, analyzer, oom_log):
        failures = analyzer.analyze_failure(oom_log)

        assert failures[0].type == FailureType.RESOURCE
        assert failures[0].severity == FailureSeverity.HIGH

    def test_one_failure_per_matching_matcher(self, analyzer, npm_log):
        """Three dependency matchers fire on the ERESOLVE log."""
        failures = analyzer.analyze_failure(npm_log)

        dependency = [f for f in failures if f.type == FailureType.DEPENDENCY]
        assert len(dependency) == 3
        assert all(f.matched_pattern for f in dependency)

    def test_empty_log_yields_unknown(self, analyzer):
        failures = analyzer.analyze_failure("")

        assert len(failures) == 1
        assert failures[0].type == FailureType.UNKNOWN
        assert failures[0].severity == FailureSeverity.MEDIUM
        assert failures[0].message == "Unknown failure"
        assert failures[0].matched_pattern == ""

    def test_unmatched_log_yields_unknown(self, analyzer):
        failures = analyzer.analyze_failure("Everything looks fine to me")

        assert [f.type for f in failures] == [FailureType.UNKNOWN]

    @pytest.mark.parametrize("fragment", ["expect ", "● x "])
    def test_long_single_line_scans_quickly(self, analyzer, fragment):
        """Test-failure matchers stay linear on one huge line without a match."""
        log = fragment * 50_000

        started = time.monotonic()
        failures = analyzer.analyze_failure(log)

        assert time.monotonic() - started < 5
        assert [f.type for f in failures] == [FailureType.UNKNOWN]

    def test_jest_test_title_still_detected(self, analyzer):
        failures = analyzer.analyze_failure("● Button component › handles click events")

        assert [f.type for f in failures] == [FailureType.TEST]

    def test_sorted_most_severe_first(self, analyzer):
        log = "AssertionError: values differ\nFATAL: out of memory"

        failures = analyzer.analyze_failure(log)

        assert failures[0].type == FailureType.RESOURCE
        assert failures[0].severity == FailureSeverity.HIGH
        assert failures[-1].type == FailureType.TEST
        assert failures[-1].severity == FailureSeverity.MEDIUM
        ranks = [SEVERITY_RANK[f.severity] for f in failures]
        assert ranks == sorted(ranks)

    def test_ties_keep_rule_order(self, analyzer):
        """Build rules come before permission rules in the catalog."""
        log = "permission denied while writing\nbuild failed"

        failures = analyzer.analyze_failure(log)

        assert [f.type for f in failures] == [FailureType.BUILD, FailureType.PERMISSION]

    def test_extracts_location(self, analyzer):
        log = "src/app.ts:42:7 - error TS2304: Cannot find name 'foo'."

        failures = analyzer.analyze_failure(log)

        assert failures[0].type == FailureType.BUILD
        assert failures[0].location == "src/app.ts:42:7"

    def test_location_outside_window_is_ignored(self, analyzer):
        log = "src/app.ts:42\n" + ("x" * 400) + "\nbuild failed"

        failures = analyzer.analyze_failure(log)

        assert failures[0].location is None

    def test_platform_overlay_applies(self):
        log = "ERROR: Runner system failure"

        gitlab = FailureAnalyzer(SelfHealingOptions(platform="gitlab")).analyze_failure(log)
        github = FailureAnalyzer(SelfHealingOptions(platform="github")).analyze_failure(log)

        assert gitlab[0].type == FailureType.RESOURCE
        assert gitlab[0].description == "GitLab CI runner resource issues"
        assert github[0].type == FailureType.UNKNOWN

    def test_unknown_platform_uses_common_rules(self):
        analyzer = FailureAnalyzer(SelfHealingOptions(platform="jenkins"))

        failures = analyzer.analyze_failure("connection refused")

        assert failures[0].type == FailureType.NETWORK

    def test_deterministic(self, analyzer, npm_log):
        assert analyzer.analyze_failure(npm_log) == analyzer.analyze_failure(npm_log)


class TestSuggestFixes:
    """Tests for FailureAnalyzer.suggest_fixes."""

    def test_one_suggestion_per_failure(self, analyzer, jest_log):
        failures = analyzer.analyze_failure(jest_log)

        suggestions = analyzer.suggest_fixes(failures)

        assert [s.failure for s in suggestions] == failures
        assert suggestions[0].fixes
        assert suggestions[0].confidence > 0

    def test_test_failure_has_no_automated_fix(self, analyzer):
        failures = analyzer.analyze_failure("FAIL src/x.test.js ... expect(fn()).toHaveBeenCalledTimes(1)")

        suggestion = analyzer.suggest_fixes(failures)[0]

        assert suggestion.auto_fix_possible is False
        assert 40 <= suggestion.confidence <= 70

    def test_dependency_failure_is_auto_fixable(self, analyzer):
        failures = analyzer.analyze_failure("npm ERR! code ERESOLVE ... could not resolve dependency tree")

        suggestion = analyzer.suggest_fixes(failures)[0]

        assert suggestion.failure.type == FailureType.DEPENDENCY
        assert suggestion.failure.severity == FailureSeverity.HIGH
        assert suggestion.auto_fix_possible is True
        assert any(fix.automated_script for fix in suggestion.fixes)

    def test_platform_specific_fix_raises_confidence(self, analyzer):
        failures = analyzer.analyze_failure("Error: permission denied")

        suggestion = analyzer.suggest_fixes(failures)[0]

        assert suggestion.failure.type == FailureType.PERMISSION
        assert any(fix.platform_specific for fix in suggestion.fixes)
        assert suggestion.confidence == 85

    def test_unknown_failure_confidence(self, analyzer):
        suggestion = analyzer.suggest_fixes(analyzer.analyze_failure(""))[0]

        # medium base, no fixes, unknown type
        assert suggestion.confidence == 10
        assert suggestion.fixes == []
        assert suggestion.auto_fix_possible is False

    @pytest.mark.parametrize("severity", list(FailureSeverity))
    def test_unknown_confidence_capped(self, analyzer, severity):
        suggestion = analyzer.suggest_fixes([_failure(FailureType.UNKNOWN, severity)])[0]

        assert 0 <= suggestion.confidence <= 60

    def test_confidence_clamped_at_zero(self, analyzer):
        suggestion = analyzer.suggest_fixes([_failure(FailureType.UNKNOWN, FailureSeverity.LOW)])[0]

        assert suggestion.confidence == 0

    def test_confidence_monotonic_in_severity(self):
        analyzer = FailureAnalyzer(catalog=_build_catalog(fix_count=1))

        critical, low = analyzer.suggest_fixes([
            _failure(FailureType.BUILD, FailureSeverity.CRITICAL),
            _failure(FailureType.BUILD, FailureSeverity.LOW),
        ])

        assert critical.confidence == 90
        assert low.confidence == 40
        assert critical.confidence > low.confidence

    def test_many_fixes_lower_confidence(self):
        analyzer = FailureAnalyzer(catalog=_build_catalog(fix_count=4))

        suggestion = analyzer.suggest_fixes([_failure(FailureType.BUILD, FailureSeverity.HIGH)])[0]

        assert len(suggestion.fixes) == 4
        assert suggestion.confidence == 65

    def test_empty_input(self, analyzer):
        assert analyzer.suggest_fixes([]) == []
