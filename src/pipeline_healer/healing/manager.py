"""Self-healing orchestration for CI/CD pipeline failures."""

import logging
from contextlib import contextmanager
from pathlib import Path

from ..analyzer import FailureAnalyzer
from ..catalog import Catalog
from ..config import Config, SelfHealingOptions
from ..models import (
    AnalysisResult,
    FailureSeverity,
    FailureType,
    FixAttemptResult,
    FixSuggestion,
    SelfHealingReport,
)
from ..tracing import TracingClient, get_tracing
from .executor import ScriptRunner
from .history import HistoryStore, excerpt
from .scorecard import evaluate_pipeline

logger = logging.getLogger(__name__)

NOTIFY_SEVERITIES = (FailureSeverity.CRITICAL, FailureSeverity.HIGH)


class SelfHealingManager:
    """Analyze failures, run automated fixes and score pipeline resilience."""

    def __init__(
        self,
        options: SelfHealingOptions | None = None,
        catalog: Catalog | None = None,
        history: HistoryStore | None = None,
        runner: ScriptRunner | None = None,
        tracing: TracingClient | None = None,
    ):
        self.options = options or SelfHealingOptions()
        self.analyzer = FailureAnalyzer(self.options, catalog)
        self.history = history or HistoryStore(Config().history_dir)
        self.runner = runner or ScriptRunner(self.options)
        self._tracing = tracing or get_tracing()

    @classmethod
    def from_config(cls, config: Config, catalog: Catalog | None = None) -> "SelfHealingManager":
        """Create a manager wired to the configured history directory."""
        return cls(
            options=config.healing,
            catalog=catalog,
            history=HistoryStore(config.history_dir),
        )

    @property
    def platform(self) -> str:
        return self.options.platform

    def analyze_failure(self, log: str) -> AnalysisResult:
        """
        Classify a failure log, suggest fixes and record the analysis.

        A failure to write the history record is logged and otherwise
        ignored.
        """
        with self._trace("analyze_failure") as trace:
            failures = self.analyzer.analyze_failure(log)
            suggestions = self.analyzer.suggest_fixes(failures)

            if self.options.notify_on_failure:
                for failure in failures:
                    if failure.severity in NOTIFY_SEVERITIES:
                        logger.warning(
                            "%s %s failure: %s",
                            failure.severity.value.capitalize(),
                            failure.type.value,
                            failure.message,
                        )

            self._save_analysis(log, AnalysisResult(failures, suggestions))

            self._span(
                trace,
                "classify",
                input_data=excerpt(log) if self.options.collect_logs else None,
                output_data={
                    "failures": len(failures),
                    "types": sorted({f.type.value for f in failures}),
                },
            )
            self._record_outcome(trace, True, {"failures": len(failures)})

        return AnalysisResult(failures=failures, suggestions=suggestions)

    def attempt_fix(
        self,
        suggestion: FixSuggestion,
        working_directory: Path | str,
        timeout: float | None = None,
    ) -> FixAttemptResult:
        """
        Run the first automated fix of a suggestion.

        Never raises for script problems: non-zero exits, timeouts and OS
        errors all come back as an unsuccessful result.
        """
        if not suggestion.auto_fix_possible:
            return FixAttemptResult(
                success=False,
                message="No automatic fix available for this failure",
            )

        fix = next((f for f in suggestion.fixes if f.has_script), None)
        if fix is None:
            return FixAttemptResult(success=False, message="No fix script available")

        with self._trace("attempt_fix") as trace:
            logger.info("Applying fix '%s' in %s", fix.description, working_directory)
            success, output, error = self.runner.run(fix.automated_script, Path(working_directory), timeout)

            if success:
                result = FixAttemptResult(
                    success=True,
                    message=f"Successfully applied fix: {fix.description}",
                    output=output,
                    error=error,
                )
            else:
                logger.error("Fix '%s' failed: %s", fix.description, error)
                result = FixAttemptResult(
                    success=False,
                    message=f"Failed to apply fix: {error}",
                    output=output,
                    error=error,
                )

            self._save_fix_attempt(suggestion, result)
            self._span(
                trace,
                "run_fix_script",
                input_data={"fix": fix.description, "failure_type": suggestion.failure.type.value},
                output_data={"success": result.success},
                status_message=None if result.success else (result.error or result.message),
            )
            self._record_outcome(trace, result.success, {"message": result.message})

        return result

    def heal(
        self,
        log: str,
        working_directory: Path | str,
    ) -> tuple[AnalysisResult, list[FixAttemptResult]]:
        """
        Analyze a log and, when auto-fix is enabled, run its automated fixes.

        Each failure type is fixed at most once per call.
        """
        analysis = self.analyze_failure(log)
        attempts: list[FixAttemptResult] = []

        if not self.options.auto_fix:
            return analysis, attempts

        fixed_types: set[FailureType] = set()
        for suggestion in analysis.suggestions:
            if not suggestion.auto_fix_possible or suggestion.failure.type in fixed_types:
                continue
            fixed_types.add(suggestion.failure.type)
            attempts.append(self.attempt_fix(suggestion, working_directory))

        return analysis, attempts

    def generate_self_healing_report(self, platform: str, pipeline_text: str) -> SelfHealingReport:
        """Score a pipeline definition for retry, caching and timeout coverage."""
        return evaluate_pipeline(platform, pipeline_text)

    def _save_analysis(self, log: str, analysis: AnalysisResult) -> None:
        try:
            path = self.history.record_analysis(
                platform=self.platform,
                log=log if self.options.collect_logs else None,
                failures=analysis.failures,
                suggestions=analysis.suggestions,
            )
            logger.debug("Saved analysis to %s", path)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to save analysis: %s", e)

    def _save_fix_attempt(self, suggestion: FixSuggestion, result: FixAttemptResult) -> None:
        try:
            path = self.history.record_fix_attempt(
                platform=self.platform,
                suggestion=suggestion,
                success=result.success,
                output=result.output,
                error=result.error,
            )
            logger.debug("Saved fix attempt to %s", path)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to log fix attempt: %s", e)

    @contextmanager
    def _trace(self, name: str):
        """Yield the Langfuse trace, or None when tracing is off."""
        if not self._tracing or not self._tracing.enabled:
            yield None
            return

        with self._tracing.trace(name, metadata={"platform": self.platform}) as trace:
            yield trace

    def _span(self, trace, name: str, input_data=None, output_data=None, status_message=None) -> None:
        if trace is not None:
            self._tracing.span(
                trace.id,
                name,
                input_data=input_data,
                output_data=output_data,
                status_message=status_message,
            )

    def _record_outcome(self, trace, success: bool, output: dict) -> None:
        if trace is not None:
            self._tracing.record_outcome(trace, success, output)
