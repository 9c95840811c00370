from __future__ import annotations

from dataclasses import dataclass

# Highest Phred-scaled mapping quality accepted on a record.
MAX_MAPQ = 93

# SAM convention: MAPQ 255 means "mapping quality not available".
MAPQ_UNAVAILABLE = 255

REGULAR_BASES = frozenset("ACGT")
UNKNOWN_BASE = "N"


@dataclass(frozen=True)
class BulkOptions:
    """Options for converting many records at once.

    Attributes
    ----------
    workers:
        Number of worker processes. ``1`` converts in the calling process.
    chunk_size:
        Records handed to a worker per task.
    progress:
        Show a tqdm progress bar.
    """

    workers: int = 1
    chunk_size: int = 1000
    progress: bool = False
