"""Resilience scorecard for pipeline definitions.

The checks are plain substring searches over the raw pipeline text. A
capability written in syntax the markers do not cover is reported as
missing; the score is a best-effort heuristic, not a guarantee.
"""

from dataclasses import dataclass

from ..models import SelfHealingReport, Vulnerability

MAX_SCORE = 100


@dataclass(frozen=True)
class ResilienceCheck:
    """A capability that counts as present when any marker appears."""

    markers: tuple[str, ...]
    penalty: int
    vulnerability: Vulnerability
    recommendation: str

    def passes(self, text: str) -> bool:
        return any(marker in text for marker in self.markers)


def _missing_retry(description: str, recommendation: str, follow_up: str, markers: tuple[str, ...]) -> ResilienceCheck:
    return ResilienceCheck(
        markers=markers,
        penalty=15,
        vulnerability=Vulnerability(
            type="Missing Retry Mechanism",
            description=description,
            severity="Medium",
            recommendation=recommendation,
        ),
        recommendation=follow_up,
    )


def _missing_cache(recommendation: str, markers: tuple[str, ...]) -> ResilienceCheck:
    return ResilienceCheck(
        markers=markers,
        penalty=10,
        vulnerability=Vulnerability(
            type="Missing Caching",
            description="No caching mechanism found for dependencies or build artifacts",
            severity="Low",
            recommendation=recommendation,
        ),
        recommendation="Implement caching for dependencies and build artifacts",
    )


PLATFORM_CHECKS: dict[str, tuple[ResilienceCheck, ...]] = {
    "github": (
        _missing_retry(
            "No retry mechanism found for potentially flaky steps",
            "Add continue-on-error: true for non-critical steps or implement retry logic",
            "Add retry mechanisms for potentially flaky steps",
            ("continue-on-error", "retry"),
        ),
        _missing_cache(
            "Use actions/cache to cache dependencies and build artifacts",
            ("actions/cache",),
        ),
    ),
    "gitlab": (
        _missing_retry(
            "No retry mechanism found for potentially flaky jobs",
            "Add retry configuration for jobs that might be flaky",
            "Add retry configuration for potentially flaky jobs",
            ("retry:",),
        ),
        _missing_cache(
            "Use GitLab CI caching to cache dependencies and build artifacts",
            ("cache:",),
        ),
    ),
    "circleci": (
        _missing_retry(
            "No retry mechanism or failure handling found",
            "Add when: on_fail conditions or implement retry logic",
            "Add failure handling mechanisms",
            ("when: on_fail", "no_output_timeout:"),
        ),
        _missing_cache(
            "Use CircleCI caching to cache dependencies and build artifacts",
            ("save_cache", "restore_cache"),
        ),
    ),
    "aws": (
        _missing_retry(
            "No retry mechanism found for potentially flaky steps",
            "Add retry configuration for CodeBuild projects or Lambda functions",
            "Add retry configuration for potentially flaky steps",
            ("RetryCount", "RetryMode"),
        ),
    ),
}

COMMON_CHECKS: tuple[ResilienceCheck, ...] = (
    ResilienceCheck(
        markers=("timeout", "Timeout", "time-out", "TimeoutInMinutes"),
        penalty=5,
        vulnerability=Vulnerability(
            type="Missing Timeout Configuration",
            description="No timeout configuration found for jobs or steps",
            severity="Low",
            recommendation="Add appropriate timeout configuration to prevent hanging jobs",
        ),
        recommendation="Add timeout configuration for jobs and steps",
    ),
)


def evaluate_pipeline(platform: str, pipeline_text: str) -> SelfHealingReport:
    """Score a pipeline definition against the resilience checklist."""
    report = SelfHealingReport(self_healing_score=MAX_SCORE)
    checks = (*PLATFORM_CHECKS.get(platform, ()), *COMMON_CHECKS)

    for check in checks:
        if check.passes(pipeline_text):
            continue
        report.vulnerabilities.append(check.vulnerability)
        report.recommendations.append(check.recommendation)
        report.self_healing_score -= check.penalty

    report.self_healing_score = max(0, min(MAX_SCORE, report.self_healing_score))
    return report
