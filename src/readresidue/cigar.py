"""Read offset to reference coordinate mapping.

A read offset is an index into the record's base sequence (soft clips included,
hard clips excluded). Offsets inside insertions and soft clips have no
reference coordinate.
"""

from __future__ import annotations

import re
from typing import Iterator, List, Optional, Tuple

from .mdtag import MismatchAnnotation
from .models import CigarElement, ReadRecord, ReferencePosition, ReferenceSequenceContext

_CIGAR_RE = re.compile(r"(\d+)([MIDNSHP=X])")
_CIGAR_FULL_RE = re.compile(r"^(\d+[MIDNSHP=X])*$")

_CONSUMES_BOTH = frozenset("M=X")
_CONSUMES_QUERY_ONLY = frozenset("IS")
_CONSUMES_REF_ONLY = frozenset("DN")

UNKNOWN_REFERENCE = "*"


def parse_cigar(cigar: str) -> List[CigarElement]:
    """Parse a CIGAR string into elements; raise ValueError if it is malformed."""
    if cigar in ("", "*"):
        return []
    if not _CIGAR_FULL_RE.match(cigar):
        raise ValueError(f"Malformed CIGAR string: {cigar!r}")
    return [CigarElement(int(n), op) for n, op in _CIGAR_RE.findall(cigar)]


def _walk(record: ReadRecord) -> Iterator[Tuple[CigarElement, int, Optional[int]]]:
    """Yield (element, offset within element, reference pos or None) per read base."""
    ref_pos = int(record.start) if record.start is not None else 0
    for el in parse_cigar(record.cigar or ""):
        if el.op in _CONSUMES_BOTH:
            for i in range(el.length):
                yield el, i, ref_pos + i
            ref_pos += el.length
        elif el.op in _CONSUMES_QUERY_ONLY:
            for i in range(el.length):
                yield el, i, None
        elif el.op in _CONSUMES_REF_ONLY:
            ref_pos += el.length
        # H, P: consume neither


def _reference_name(record: ReadRecord) -> str:
    return record.reference_name if record.reference_name is not None else UNKNOWN_REFERENCE


def reference_positions(record: ReadRecord) -> List[Optional[ReferencePosition]]:
    """Reference position for every read offset; all None for unmapped reads.

    The result has one entry per base described by the CIGAR, which may differ
    from the sequence length when the record is inconsistent.
    """
    if not record.read_mapped:
        return [None] * len(record.sequence)

    chrom = _reference_name(record)
    return [
        ReferencePosition(chrom, pos) if pos is not None else None
        for _, _, pos in _walk(record)
    ]


def reference_contexts(
    record: ReadRecord, annotation: Optional[MismatchAnnotation]
) -> List[Optional[ReferenceSequenceContext]]:
    """Reference sequence context for every read offset.

    The reference base comes from the MD annotation: the mismatched reference
    base where the read disagrees, the read's own base where it matches, and
    None when there is no annotation.
    """
    if not record.read_mapped:
        return [None] * len(record.sequence)

    chrom = _reference_name(record)
    out: List[Optional[ReferenceSequenceContext]] = []
    for offset, (el, el_offset, pos) in enumerate(_walk(record)):
        if pos is None:
            out.append(None)
            continue
        ref_base: Optional[str] = None
        if annotation is not None:
            ref_base = annotation.mismatched_base(pos)
            if ref_base is None and annotation.is_match(pos):
                ref_base = record.sequence[offset]
        out.append(
            ReferenceSequenceContext(
                position=ReferencePosition(chrom, pos),
                reference_base=ref_base,
                cigar_element=el,
                cigar_element_offset=el_offset,
            )
        )
    return out
