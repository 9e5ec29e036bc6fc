"""invsync utility modules."""

from invsync.utils.logging import configure_logging, reconciliation_context
from invsync.utils.variables import decode_variables, encode_variables

__all__ = [
    "configure_logging",
    "decode_variables",
    "encode_variables",
    "reconciliation_context",
]
