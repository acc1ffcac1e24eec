"""Healing module - fix execution, audit history and resilience scoring."""

from .executor import ScriptExecutionError, ScriptRunner
from .history import HistoryStore
from .manager import SelfHealingManager
from .scorecard import evaluate_pipeline

__all__ = [
    "HistoryStore",
    "ScriptExecutionError",
    "ScriptRunner",
    "SelfHealingManager",
    "evaluate_pipeline",
]
