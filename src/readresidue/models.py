from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class ReadRecord:
    """A raw read record, as produced by an aligner or loaded from SAM/BAM.

    Coordinates are 0-based. Nothing here is validated; see
    :class:`readresidue.read.SequencedRead` for the checked view.

    Attributes
    ----------
    read_name:
        Query name.
    sequence:
        Base sequence, one character per base (soft clips included).
    qualities:
        Phred base qualities, one per base.
    start:
        0-based leftmost reference position of the alignment (if mapped).
    mapq:
        Mapping quality; ``None`` or 255 mean "not available".
    cigar:
        CIGAR string (e.g. ``"10M2I5M"``) for mapped reads.
    md_tag:
        Value of the ``MD`` auxiliary field, if present.
    """

    read_name: str
    sequence: str
    qualities: Tuple[int, ...]
    read_mapped: bool = False
    primary_alignment: bool = False
    duplicate_read: bool = False
    read_paired: bool = False
    first_of_pair: bool = False
    second_of_pair: bool = False
    read_negative_strand: bool = False
    failed_vendor_quality_checks: bool = False
    start: Optional[int] = None
    mapq: Optional[int] = None
    record_group_name: Optional[str] = None
    reference_name: Optional[str] = None
    cigar: Optional[str] = None
    md_tag: Optional[str] = None


@dataclass(frozen=True, order=True)
class ReferencePosition:
    """A single 0-based coordinate on a named reference sequence."""

    reference_name: str
    pos: int


@dataclass(frozen=True)
class CigarElement:
    length: int
    op: str  # one of MIDNSHP=X

    def __str__(self) -> str:
        return f"{self.length}{self.op}"


@dataclass(frozen=True)
class ReferenceSequenceContext:
    """Where a read base lands on the reference, and what the reference says there."""

    position: ReferencePosition
    reference_base: Optional[str]  # None when the read has no MD tag
    cigar_element: CigarElement
    cigar_element_offset: int
