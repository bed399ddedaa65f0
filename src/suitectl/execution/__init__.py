"""
Execution layer: retry policy, the concurrent batch engine and result sinks.

:class:`~suitectl.execution.context.InvocationContext` lives in its own
module and is imported from there.
"""

from suitectl.execution.engine import BatchEngine, BatchResult, BatchSummary
from suitectl.execution.retry import RetryContext, RetryPolicy
from suitectl.execution.sinks import AggregateSink, StreamingSink, emit, make_sink

__all__ = [
    "AggregateSink",
    "BatchEngine",
    "BatchResult",
    "BatchSummary",
    "RetryContext",
    "RetryPolicy",
    "StreamingSink",
    "emit",
    "make_sink",
]
