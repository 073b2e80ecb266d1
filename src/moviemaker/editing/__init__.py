"""Edit requests and the orchestration entry point.

The orchestrator lives in moviemaker.editing.orchestrator; it is not
re-exported here because the command builder imports the request types
from this package.
"""

from moviemaker.editing.requests import (
    ConcatRequest,
    ConvertRequest,
    EditRequest,
    FilterRequest,
    TrimRequest,
)

__all__ = [
    "ConcatRequest",
    "ConvertRequest",
    "EditRequest",
    "FilterRequest",
    "TrimRequest",
]
