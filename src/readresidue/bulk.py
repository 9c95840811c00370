"""Collection-level conversions between raw records and read models.

Both directions are plain, order-preserving maps. A single invalid record
fails the whole record-to-read conversion; there is no best-effort mode.
"""

from __future__ import annotations

import logging
import multiprocessing as mp
import time
from typing import Iterable, List, Optional

from tqdm import tqdm

from .config import BulkOptions
from .models import ReadRecord
from .read import SequencedRead

logger = logging.getLogger(__name__)


def reads_from_records(
    records: Iterable[ReadRecord],
    options: Optional[BulkOptions] = None,
) -> List[SequencedRead]:
    """Validate and wrap every record.

    Raises
    ------
    InvalidReadError
        For the first record (in input order) that fails validation.
    """
    opts = options or BulkOptions()
    if opts.workers < 1:
        raise ValueError("workers must be >= 1")
    if opts.chunk_size < 1:
        raise ValueError("chunk_size must be >= 1")

    t0 = time.time()
    total = len(records) if hasattr(records, "__len__") else None  # type: ignore[arg-type]

    if opts.workers == 1:
        it: Iterable[SequencedRead] = map(SequencedRead, records)
        if opts.progress:
            it = tqdm(it, total=total, unit="read", desc="Validating reads")
        reads = list(it)
    else:
        logger.info("Using %d workers for read validation", opts.workers)
        with mp.Pool(processes=opts.workers) as pool:
            it = pool.imap(SequencedRead, records, chunksize=opts.chunk_size)
            if opts.progress:
                it = tqdm(it, total=total, unit="read", desc="Validating reads")
            reads = list(it)

    logger.info("Validated %d reads in %.2fs", len(reads), time.time() - t0)
    return reads


def records_from_reads(reads: Iterable[SequencedRead]) -> List[ReadRecord]:
    """Recover the raw record behind each read."""
    return [read.record for read in reads]
