"""Error taxonomy for board loading and routing setup.

All failures are reported through a single exception type carrying a flat
``ErrorKind``; callers branch on the kind rather than on a class
hierarchy.
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """What went wrong while loading a board or preparing a route."""
    IO_FAILURE = "io_failure"
    WRONG_FILE_EXTENSION = "wrong_file_extension"
    TREE_PARSE_FAILURE = "tree_parse_failure"
    MISSING_OR_MALFORMED_GENERAL_SECTION = "missing_or_malformed_general_section"
    MISSING_OR_MALFORMED_LAYER = "missing_or_malformed_layer"
    MISSING_OR_MALFORMED_NET = "missing_or_malformed_net"
    MISSING_OR_MALFORMED_FOOTPRINT = "missing_or_malformed_footprint"
    MISSING_OR_MALFORMED_PAD = "missing_or_malformed_pad"
    MISSING_OR_MALFORMED_WIRE = "missing_or_malformed_wire"
    MISSING_OR_MALFORMED_VIA = "missing_or_malformed_via"
    INVALID_SETTINGS = "invalid_settings"
    UNCLASSIFIED = "unclassified"


class BoardError(Exception):
    """Raised when a board cannot be loaded or routed.

    Attributes:
        kind: Error category
        detail: Human-readable detail (may be empty)
    """

    def __init__(self, kind: ErrorKind, detail: Optional[str] = None):
        self.kind = kind
        self.detail = detail or ""
        message = kind.value.replace("_", " ")
        if self.detail:
            message = f"{message}: {self.detail}"
        super().__init__(message)
