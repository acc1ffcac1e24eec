"""Analyzer module - failure log classification."""

from .failure_analyzer import FailureAnalyzer

__all__ = ["FailureAnalyzer"]
