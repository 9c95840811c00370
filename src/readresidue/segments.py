"""Projection between pysam alignments and :class:`ReadRecord`.

SAM has no "primary" bit; a record is primary when it is mapped and neither
secondary (0x100) nor supplementary (0x800). Unmapped segments carry no start
and no mapping quality.
"""

from __future__ import annotations

import array
import logging
from typing import Optional

import pysam

from .config import MAPQ_UNAVAILABLE
from .models import ReadRecord

logger = logging.getLogger(__name__)


def _optional_tag(segment: pysam.AlignedSegment, tag: str) -> Optional[str]:
    if segment.has_tag(tag):
        return str(segment.get_tag(tag))
    return None


def _reference_name(segment: pysam.AlignedSegment) -> Optional[str]:
    if segment.reference_id < 0 or segment.header is None:
        return None
    return segment.reference_name


def record_from_segment(segment: pysam.AlignedSegment) -> ReadRecord:
    """Build a raw record from a pysam alignment."""
    mapped = not segment.is_unmapped
    quals = segment.query_qualities
    return ReadRecord(
        read_name=str(segment.query_name),
        sequence=segment.query_sequence or "",
        qualities=tuple(int(q) for q in quals) if quals is not None else (),
        read_mapped=mapped,
        primary_alignment=mapped and not segment.is_secondary and not segment.is_supplementary,
        duplicate_read=bool(segment.is_duplicate),
        read_paired=bool(segment.is_paired),
        first_of_pair=bool(segment.is_read1),
        second_of_pair=bool(segment.is_read2),
        read_negative_strand=bool(segment.is_reverse),
        failed_vendor_quality_checks=bool(segment.is_qcfail),
        start=int(segment.reference_start) if mapped else None,
        mapq=int(segment.mapping_quality) if mapped else None,
        record_group_name=_optional_tag(segment, "RG"),
        reference_name=_reference_name(segment) if mapped else None,
        cigar=segment.cigarstring if mapped else None,
        md_tag=_optional_tag(segment, "MD"),
    )


def segment_from_record(
    record: ReadRecord, header: Optional[pysam.AlignmentHeader] = None
) -> pysam.AlignedSegment:
    """Build a pysam alignment from a raw record.

    ``header`` resolves ``reference_name`` to a reference id; without it (or if
    the name is unknown to it) the segment gets no reference id.
    """
    a = pysam.AlignedSegment(header)
    a.query_name = record.read_name
    a.query_sequence = record.sequence
    a.is_unmapped = not record.read_mapped
    a.is_secondary = record.read_mapped and not record.primary_alignment
    a.is_duplicate = record.duplicate_read
    a.is_paired = record.read_paired
    a.is_read1 = record.first_of_pair
    a.is_read2 = record.second_of_pair
    a.is_reverse = record.read_negative_strand
    a.is_qcfail = record.failed_vendor_quality_checks

    tid = -1
    if header is not None and record.reference_name is not None:
        tid = header.get_tid(record.reference_name)
        if tid < 0:
            logger.warning("Reference %s not present in header", record.reference_name)
    a.reference_id = tid
    a.reference_start = record.start if record.start is not None else -1
    a.mapping_quality = record.mapq if record.mapq is not None else MAPQ_UNAVAILABLE
    if record.cigar:
        a.cigarstring = record.cigar
    # qualities must be set after the sequence
    a.query_qualities = array.array("B", record.qualities)

    if record.record_group_name is not None:
        a.set_tag("RG", record.record_group_name, value_type="Z")
    if record.md_tag is not None:
        a.set_tag("MD", record.md_tag, value_type="Z")
    return a
