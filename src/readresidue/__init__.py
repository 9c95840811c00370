"""ReadResidue: validated, per-base queryable models of aligned sequencing reads.

Typical use:

    read = SequencedRead(record)
    snps = [r.offset for r in read.residues if r.is_snp]

"""

from __future__ import annotations

from .bulk import reads_from_records, records_from_reads
from .errors import (
    InvalidReadError,
    MissingAnnotationError,
    MissingReferenceLocationError,
    NotAlignedError,
    ReadModelError,
    UnexpectedBaseError,
)
from .models import ReadRecord
from .read import Residue, SequencedRead

__all__ = [
    "__version__",
    "InvalidReadError",
    "MissingAnnotationError",
    "MissingReferenceLocationError",
    "NotAlignedError",
    "ReadModelError",
    "ReadRecord",
    "Residue",
    "SequencedRead",
    "UnexpectedBaseError",
    "reads_from_records",
    "records_from_reads",
]

__version__ = "0.1.0"
