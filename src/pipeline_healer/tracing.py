"""Optional Langfuse tracing for analyses and fix attempts.

A trace covers one manager operation. Its outcome is written back onto the
trace once the operation knows it: ``success`` or ``failure`` for a finished
operation, ``error`` when the operation raised.
"""

from contextlib import contextmanager
from typing import Any, Iterator

from langfuse import Langfuse

from .config import Config


class TracingClient:
    """Records manager operations in Langfuse when enabled in config."""

    def __init__(self, config: Config):
        self.enabled = config.langfuse.enabled
        self._client: Langfuse | None = None

        if self.enabled:
            self._client = Langfuse(
                public_key=config.langfuse.public_key,
                secret_key=config.langfuse.secret_key,
                host=config.langfuse.host,
            )

    @contextmanager
    def trace(self, name: str, metadata: dict | None = None) -> Iterator[Any]:
        """Open a trace for one operation; yields None when tracing is off."""
        if not self._client:
            yield None
            return

        trace = self._client.trace(name=name, metadata=metadata or {})
        try:
            yield trace
        except Exception as e:
            trace.update(output={"error": str(e)}, tags=["error"])
            raise

    def record_outcome(self, trace: Any, success: bool, output: Any = None) -> None:
        """Tag a trace with how its operation ended."""
        if trace is None:
            return
        trace.update(output=output, tags=["success" if success else "failure"])

    def span(
        self,
        trace_id: str | None,
        name: str,
        input_data: Any = None,
        output_data: Any = None,
        status_message: str | None = None,
    ) -> None:
        """Log one step of an operation. A status message marks the step as failed."""
        if not self._client:
            return

        self._client.span(
            trace_id=trace_id,
            name=name,
            input=input_data,
            output=output_data,
            level="ERROR" if status_message else "DEFAULT",
            status_message=status_message,
        )

    def flush(self) -> None:
        if self._client:
            self._client.flush()


_tracing: TracingClient | None = None


def init_tracing(config: Config) -> TracingClient:
    """Install the process-wide tracing client."""
    global _tracing
    _tracing = TracingClient(config)
    return _tracing


def get_tracing() -> TracingClient | None:
    return _tracing
