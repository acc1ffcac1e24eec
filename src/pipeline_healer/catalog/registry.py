"""Immutable catalog of failure patterns and fixes."""

import logging
import re
from functools import lru_cache
from types import MappingProxyType

from ..models import FailureFix, FailurePattern, FailureSeverity, FailureType
from .fixes import COMMON_FIXES, PLATFORM_FIXES
from .patterns import COMMON_PATTERNS, PLATFORM_PATTERNS

logger = logging.getLogger(__name__)


class CatalogError(ValueError):
    """Raised when a rule or fix table entry is malformed."""


class Catalog:
    """Lookup of detection rules and remediation recipes.

    Built once from declarative tables and never mutated afterwards, so a
    single instance can be shared between any number of analyzers.
    """

    def __init__(
        self,
        common_patterns: list[FailurePattern],
        platform_patterns: dict[str, list[FailurePattern]],
        common_fixes: list[FailureFix],
        platform_fixes: dict[str, list[FailureFix]],
    ):
        self._common_patterns = tuple(common_patterns)
        self._platform_patterns = MappingProxyType(
            {name: tuple(rules) for name, rules in platform_patterns.items()}
        )
        self._common_fixes = tuple(common_fixes)
        self._platform_fixes = MappingProxyType(
            {name: tuple(fixes) for name, fixes in platform_fixes.items()}
        )

    @classmethod
    def from_tables(
        cls,
        common_patterns: list[dict],
        platform_patterns: dict[str, list[dict]],
        common_fixes: list[dict],
        platform_fixes: dict[str, list[dict]],
    ) -> "Catalog":
        """
        Build a catalog from rule and fix tables.

        Raises:
            CatalogError: If any entry is malformed (bad regex, unknown
                type or severity, rule without matchers).
        """
        return cls(
            common_patterns=[_build_pattern(rule) for rule in common_patterns],
            platform_patterns={
                platform: [_build_pattern(rule) for rule in rules]
                for platform, rules in platform_patterns.items()
            },
            common_fixes=[_build_fix(entry) for entry in common_fixes],
            platform_fixes={
                platform: [_build_fix(entry) for entry in entries]
                for platform, entries in platform_fixes.items()
            },
        )

    @property
    def platforms(self) -> list[str]:
        """Platforms that have a rule or fix overlay."""
        return sorted(set(self._platform_patterns) | set(self._platform_fixes))

    def lookup_patterns(self, platform: str) -> list[FailurePattern]:
        """Common rules followed by the overlay for ``platform``."""
        return [*self._common_patterns, *self._platform_patterns.get(platform, ())]

    def lookup_fixes(self, failure_type: FailureType, platform: str) -> list[FailureFix]:
        """All fixes for ``failure_type`` that apply on ``platform``."""
        common = [fix for fix in self._common_fixes if fix.applies_to == failure_type]
        specific = [
            fix
            for fix in self._platform_fixes.get(platform, ())
            if fix.applies_to == failure_type and platform in fix.platforms
        ]
        return common + specific


def _build_pattern(rule: dict) -> FailurePattern:
    """Compile a rule table entry."""
    description = rule.get("description", "")
    failure_type = rule.get("type")
    severity = rule.get("severity")

    if not isinstance(failure_type, FailureType):
        raise CatalogError(f"Rule '{description}' has invalid type: {failure_type!r}")
    if not isinstance(severity, FailureSeverity):
        raise CatalogError(f"Rule '{description}' has invalid severity: {severity!r}")

    sources = rule.get("patterns") or []
    if not sources:
        raise CatalogError(f"Rule '{description}' has no patterns")

    matchers = []
    for source in sources:
        try:
            matchers.append(re.compile(source, re.IGNORECASE))
        except re.error as e:
            raise CatalogError(f"Rule '{description}' has invalid pattern {source!r}: {e}") from e

    return FailurePattern(
        type=failure_type,
        severity=severity,
        matchers=tuple(matchers),
        description=description,
    )


def _build_fix(entry: dict) -> FailureFix:
    """Convert a fix table entry."""
    description = entry.get("description", "")
    failure_type = entry.get("type")
    if not isinstance(failure_type, FailureType):
        raise CatalogError(f"Fix '{description}' has invalid type: {failure_type!r}")

    platforms = frozenset(entry.get("platforms") or ())
    return FailureFix(
        applies_to=failure_type,
        description=description,
        automated_script=entry.get("script"),
        manual_steps=tuple(entry.get("manual_steps") or ()),
        platform_specific=bool(platforms),
        platforms=platforms,
    )


@lru_cache(maxsize=1)
def default_catalog() -> Catalog:
    """The built-in catalog, compiled on first use."""
    catalog = Catalog.from_tables(COMMON_PATTERNS, PLATFORM_PATTERNS, COMMON_FIXES, PLATFORM_FIXES)
    logger.debug("Loaded failure catalog for platforms: %s", ", ".join(catalog.platforms))
    return catalog
