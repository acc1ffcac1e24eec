"""Pipeline Healer - CI/CD failure diagnosis and self-healing."""

from .analyzer import FailureAnalyzer
from .catalog import Catalog, CatalogError, default_catalog
from .config import Config, SelfHealingOptions, load_config
from .healing import SelfHealingManager
from .models import (
    DetectedFailure,
    FailureFix,
    FailurePattern,
    FailureSeverity,
    FailureType,
    FixSuggestion,
    SelfHealingReport,
)

__version__ = "0.1.0"

__all__ = [
    "Catalog",
    "CatalogError",
    "Config",
    "DetectedFailure",
    "FailureAnalyzer",
    "FailureFix",
    "FailurePattern",
    "FailureSeverity",
    "FailureType",
    "FixSuggestion",
    "SelfHealingManager",
    "SelfHealingOptions",
    "SelfHealingReport",
    "default_catalog",
    "load_config",
]
