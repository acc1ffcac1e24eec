"""Classify pipeline failure logs and suggest fixes."""

import logging
import re

from ..catalog import Catalog, default_catalog
from ..config import SelfHealingOptions
from ..models import (
    SEVERITY_RANK,
    DetectedFailure,
    FailureFix,
    FailureSeverity,
    FailureType,
    FixSuggestion,
)

logger = logging.getLogger(__name__)

# file:line or file:line:column
LOCATION_PATTERN = re.compile(r"([a-zA-Z0-9_\-/.]+):(\d+)(?::(\d+))?")
LOCATION_WINDOW = 200

BASE_CONFIDENCE = {
    FailureSeverity.CRITICAL: 90,
    FailureSeverity.HIGH: 75,
    FailureSeverity.MEDIUM: 60,
    FailureSeverity.LOW: 40,
}


class FailureAnalyzer:
    """Detect failure types in a log and rank candidate fixes."""

    def __init__(
        self,
        options: SelfHealingOptions | None = None,
        catalog: Catalog | None = None,
    ):
        self.options = options or SelfHealingOptions()
        self.catalog = catalog or default_catalog()

    @property
    def platform(self) -> str:
        return self.options.platform

    def analyze_failure(self, log: str) -> list[DetectedFailure]:
        """
        Detect failures in a pipeline log.

        Every matcher of every rule is tried; each one that matches adds a
        failure. The result is never empty and is ordered most severe first.

        Args:
            log: Raw output of the failed pipeline run

        Returns:
            List of DetectedFailure sorted by severity
        """
        failures: list[DetectedFailure] = []

        for pattern in self.catalog.lookup_patterns(self.platform):
            for matcher in pattern.matchers:
                if match := matcher.search(log):
                    failures.append(DetectedFailure(
                        type=pattern.type,
                        severity=pattern.severity,
                        message=match.group(0),
                        matched_pattern=matcher.pattern,
                        description=pattern.description,
                        location=self._extract_location(log, match),
                    ))

        logger.debug("Matched %d rule(s) for platform %s", len(failures), self.platform)

        if not failures:
            failures.append(DetectedFailure(
                type=FailureType.UNKNOWN,
                severity=FailureSeverity.MEDIUM,
                message="Unknown failure",
                matched_pattern="",
                description="Could not determine the specific cause of failure",
            ))

        # sorted() is stable, so ties keep rule order
        return sorted(failures, key=lambda f: SEVERITY_RANK[f.severity])

    def suggest_fixes(self, failures: list[DetectedFailure]) -> list[FixSuggestion]:
        """Build one fix suggestion per failure, in the same order."""
        suggestions = []

        for failure in failures:
            fixes = self.catalog.lookup_fixes(failure.type, self.platform)
            suggestions.append(FixSuggestion(
                failure=failure,
                fixes=fixes,
                auto_fix_possible=any(fix.has_script for fix in fixes),
                confidence=self._calculate_confidence(failure, fixes),
            ))

        return suggestions

    def _calculate_confidence(self, failure: DetectedFailure, fixes: list[FailureFix]) -> int:
        """Score 0-100 for how likely the fixes address the failure."""
        confidence = BASE_CONFIDENCE.get(failure.severity, 30)

        if not fixes:
            confidence -= 20
        elif len(fixes) > 3:
            # Many candidates means less certainty about which one applies
            confidence -= 10

        if failure.type == FailureType.UNKNOWN:
            confidence -= 30

        if any(fix.platform_specific for fix in fixes):
            confidence += 10

        return max(0, min(100, confidence))

    def _extract_location(self, log: str, match: re.Match) -> str | None:
        """Find a file:line reference near the match."""
        start = max(0, match.start() - LOCATION_WINDOW)
        end = min(len(log), match.end() + LOCATION_WINDOW)

        if location := LOCATION_PATTERN.search(log, start, end):
            return location.group(0)

        return None
