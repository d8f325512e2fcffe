"""
Utility Package.

Pure helpers with no backend or UI dependencies.
"""

from pinboard.utils.cancellation import (
    CancellationToken,
    OperationCancelled,
    TokenSource,
)
from pinboard.utils.layout import (
    column_count_for_width,
    distribute_round_robin,
    height_for,
)

__all__ = [
    "CancellationToken",
    "OperationCancelled",
    "TokenSource",
    "column_count_for_width",
    "distribute_round_robin",
    "height_for",
]
