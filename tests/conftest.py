"""Shared fixtures for Pipeline Healer tests."""

import pytest

from pipeline_healer.config import SelfHealingOptions
from pipeline_healer.healing import HistoryStore, SelfHealingManager

JEST_LOG = """
Running tests...
FAIL src/components/Button.test.js
  Button component
    ✓ renders correctly (23ms)
    ✕ handles click events (45ms)

● Button component › handles click events

expect(jest.fn()).toHaveBeenCalledTimes(1)

Expected number of calls: 1
Received number of calls: 0
"""

NPM_ERESOLVE_LOG = """
npm ERR! code ERESOLVE
npm ERR! ERESOLVE could not resolve dependency tree
npm ERR!
npm ERR! While resolving: my-app@1.0.0
npm ERR! Found: react@17.0.2
npm ERR! node_modules/react
npm ERR!   react@"^17.0.0" from the root project
npm ERR!
npm ERR! Could not resolve dependency:
npm ERR! peer react@"^18.0.0" from react-dom@18.0.0
"""

OOM_LOG = """
<--- Last few GCs --->

[46501:0x5612a3c9c000]   138169 ms: Mark-sweep 1386.5 (1439.8) -> 1386.2 (1439.8) MB

<--- JS stacktrace --->

FATAL ERROR: Reached heap limit Allocation failed - JavaScript heap out of memory
"""


@pytest.fixture
def jest_log() -> str:
    return JEST_LOG


@pytest.fixture
def npm_log() -> str:
    return NPM_ERESOLVE_LOG


@pytest.fixture
def oom_log() -> str:
    return OOM_LOG


@pytest.fixture
def options() -> SelfHealingOptions:
    """Options with retry delays disabled so tests stay fast."""
    return SelfHealingOptions(platform="github", retry_delay_seconds=0, fix_timeout_seconds=10)


@pytest.fixture
def history(tmp_path) -> HistoryStore:
    return HistoryStore(tmp_path / "history")


@pytest.fixture
def manager(options, history) -> SelfHealingManager:
    return SelfHealingManager(options=options, history=history)


@pytest.fixture(autouse=True)
def isolated_history_dir(tmp_path, monkeypatch):
    """Keep the default history directory out of the real home."""
    monkeypatch.setenv("PIPELINE_HEALER_HISTORY_DIR", str(tmp_path / "default-history"))
