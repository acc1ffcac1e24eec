"""Core data models for Pipeline Healer."""

import re
from dataclasses import dataclass, field
from enum import Enum


class FailureType(Enum):
    """Categories of pipeline failures."""

    TEST = "test"
    BUILD = "build"
    DEPENDENCY = "dependency"
    RESOURCE = "resource"
    NETWORK = "network"
    PERMISSION = "permission"
    CONFIGURATION = "configuration"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


class FailureSeverity(Enum):
    """Severity of a detected failure."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Presentation order, most severe first
SEVERITY_RANK = {
    FailureSeverity.CRITICAL: 0,
    FailureSeverity.HIGH: 1,
    FailureSeverity.MEDIUM: 2,
    FailureSeverity.LOW: 3,
}


@dataclass(frozen=True)
class FailurePattern:
    """A detection rule: any matcher firing yields a failure of this type."""

    type: FailureType
    severity: FailureSeverity
    matchers: tuple[re.Pattern, ...]
    description: str


@dataclass
class DetectedFailure:
    """A single rule match found in a failure log."""

    type: FailureType
    severity: FailureSeverity
    message: str
    matched_pattern: str
    description: str
    location: str | None = None

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "message": self.message,
            "matched_pattern": self.matched_pattern,
            "description": self.description,
            "location": self.location,
        }


@dataclass(frozen=True)
class FailureFix:
    """A remediation recipe for one failure type."""

    applies_to: FailureType
    description: str
    automated_script: str | None = None
    manual_steps: tuple[str, ...] = ()
    platform_specific: bool = False
    platforms: frozenset[str] = frozenset()

    @property
    def has_script(self) -> bool:
        """Check if this fix can be run automatically."""
        return bool(self.automated_script)

    def to_dict(self) -> dict:
        return {
            "applies_to": self.applies_to.value,
            "description": self.description,
            "automated_script": self.automated_script,
            "manual_steps": list(self.manual_steps),
            "platform_specific": self.platform_specific,
            "platforms": sorted(self.platforms),
        }


@dataclass
class FixSuggestion:
    """Fixes proposed for a detected failure."""

    failure: DetectedFailure
    fixes: list[FailureFix]
    auto_fix_possible: bool
    confidence: int  # 0 - 100

    def to_dict(self) -> dict:
        return {
            "failure": self.failure.to_dict(),
            "fixes": [fix.to_dict() for fix in self.fixes],
            "auto_fix_possible": self.auto_fix_possible,
            "confidence": self.confidence,
        }


@dataclass
class AnalysisResult:
    """Failures found in a log together with their fix suggestions."""

    failures: list[DetectedFailure]
    suggestions: list[FixSuggestion]

    def to_dict(self) -> dict:
        return {
            "failures": [f.to_dict() for f in self.failures],
            "suggestions": [s.to_dict() for s in self.suggestions],
        }


@dataclass
class FixAttemptResult:
    """Outcome of running a fix script."""

    success: bool
    message: str
    output: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "output": self.output,
            "error": self.error,
        }


@dataclass(frozen=True)
class Vulnerability:
    """A resilience gap found in a pipeline definition."""

    type: str
    description: str
    severity: str
    recommendation: str

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "description": self.description,
            "severity": self.severity,
            "recommendation": self.recommendation,
        }


@dataclass
class SelfHealingReport:
    """Resilience scorecard for a pipeline definition."""

    vulnerabilities: list[Vulnerability] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    self_healing_score: int = 100  # 0 - 100

    def to_dict(self) -> dict:
        return {
            "vulnerabilities": [v.to_dict() for v in self.vulnerabilities],
            "recommendations": list(self.recommendations),
            "self_healing_score": self.self_healing_score,
        }
