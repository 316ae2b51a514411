"""Trust store synchronization.

This package maintains the on-disk record of trusted file paths with
their expected size and content hash, spread across one primary trust
file and any number of fragment files below a directory.
"""

from trustctl.trust.codec import (
    is_comment,
    make_record_for_path,
    parse_line,
    render_header,
    render_line,
)
from trustctl.trust.errors import (
    DuplicateKeyError,
    HashProviderError,
    MalformedRecordError,
    RecordIOError,
    RecordNotFoundError,
    RecordUnreadableError,
    TrustError,
    TrustFileNotFoundError,
    TrustFileWriteError,
)
from trustctl.trust.manager import AddResult, MismatchKind, TrustFileManager, TrustMismatch
from trustctl.trust.models import TrustRecord, TrustSource
from trustctl.trust.store import TrustStore
from trustctl.trust.walker import iter_regular_files

__all__ = [
    "AddResult",
    "DuplicateKeyError",
    "HashProviderError",
    "MalformedRecordError",
    "MismatchKind",
    "RecordIOError",
    "RecordNotFoundError",
    "RecordUnreadableError",
    "TrustError",
    "TrustFileManager",
    "TrustFileNotFoundError",
    "TrustFileWriteError",
    "TrustMismatch",
    "TrustRecord",
    "TrustSource",
    "TrustStore",
    "is_comment",
    "iter_regular_files",
    "make_record_for_path",
    "parse_line",
    "render_header",
    "render_line",
]
