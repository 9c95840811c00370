"""Validated read model with a per-base (residue) view.

A :class:`SequencedRead` wraps one :class:`~readresidue.models.ReadRecord`.
Construction checks the record once; afterwards every derived attribute is
computed on first access and cached. Reads are immutable, so sharing one
between threads needs no locking: a racing first access may compute a value
twice, but both computations yield the same result.
"""

from __future__ import annotations

import logging
import numbers
import weakref
from functools import cached_property
from typing import Optional, Tuple

import numpy as np

from .cigar import reference_contexts, reference_positions
from .config import MAPQ_UNAVAILABLE, MAX_MAPQ, REGULAR_BASES, UNKNOWN_BASE
from .errors import (
    InvalidReadError,
    MissingAnnotationError,
    MissingReferenceLocationError,
    NotAlignedError,
    UnexpectedBaseError,
)
from .mdtag import MismatchAnnotation, MismatchVerdict
from .models import ReadRecord, ReferencePosition, ReferenceSequenceContext
from .quality import QualityScore
from .utils import phred_to_error_probs

logger = logging.getLogger(__name__)


def _check(ok: bool, message: str) -> None:
    if not ok:
        raise InvalidReadError(message)


def _validate(record: ReadRecord) -> None:
    _check(
        not record.primary_alignment or record.read_mapped,
        "Unaligned read can't be a primary alignment",
    )
    _check(
        len(record.sequence) == len(record.qualities),
        "sequence and qualities must be same length",
    )
    mapq = record.mapq
    _check(
        mapq is None
        or (_is_integer(mapq) and (mapq == MAPQ_UNAVAILABLE or 0 <= mapq <= MAX_MAPQ)),
        f"mapq must be an integer in [0, {MAX_MAPQ}]",
    )
    _check(
        not record.read_mapped or (record.start is not None and record.start >= 0),
        "Invalid alignment start index",
    )
    _check(
        len(reference_positions(record)) == len(record.sequence),
        "reference positions must be same length as sequence",
    )


def _is_integer(value: object) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def _translate_mapq(mapq: Optional[int]) -> Optional[int]:
    if mapq is None or mapq == MAPQ_UNAVAILABLE:
        return None
    return int(mapq)


class Residue:
    """One base of a read, identified by its 0-based offset in the sequence.

    A residue only holds a weak reference to its read; keep the read alive for
    as long as its residues are in use.
    """

    __slots__ = ("_offset", "_read_ref")

    def __init__(self, read: "SequencedRead", offset: int) -> None:
        object.__setattr__(self, "_offset", offset)
        object.__setattr__(self, "_read_ref", weakref.ref(read))

    def __setattr__(self, key: str, value: object) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, key: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def offset(self) -> int:
        return self._offset

    def __repr__(self) -> str:
        return f"Residue(offset={self.offset})"

    @property
    def read(self) -> "SequencedRead":
        read = self._read_ref()
        if read is None:
            raise ReferenceError("The read owning this residue no longer exists")
        return read

    @property
    def base(self) -> str:
        return self.read.sequence[self.offset]

    @property
    def quality(self) -> QualityScore:
        return self.read.quality_scores[self.offset]

    @property
    def is_regular_base(self) -> bool:
        base = self.base
        if base in REGULAR_BASES:
            return True
        if base == UNKNOWN_BASE:
            return False
        raise UnexpectedBaseError(f"Encountered unexpected base '{base}'")

    def is_mismatch(self, include_insertions: bool = True) -> bool:
        """Whether the base disagrees with the reference.

        Bases without a verdict (insertions, soft clips, reads without MD) count
        as mismatches unless ``include_insertions`` is False.
        """
        read = self.read
        read.ensure_aligned()
        verdict = read.mismatch_verdict(self.offset)
        if verdict is MismatchVerdict.NO_VERDICT:
            return include_insertions
        return verdict is MismatchVerdict.MISMATCH

    @property
    def is_snp(self) -> bool:
        return self.is_mismatch(include_insertions=False)

    @property
    def is_insertion(self) -> bool:
        read = self.read
        read.ensure_aligned()
        return read.mismatch_verdict(self.offset) is MismatchVerdict.NO_VERDICT

    @property
    def reference_position_option(self) -> Optional[ReferencePosition]:
        read = self.read
        read.ensure_aligned()
        return read.reference_positions[self.offset]

    @property
    def reference_position(self) -> ReferencePosition:
        pos = self.reference_position_option
        if pos is None:
            raise MissingReferenceLocationError(
                "Residue has no reference location (may be an insertion)"
            )
        return pos

    @property
    def reference_sequence_context(self) -> Optional[ReferenceSequenceContext]:
        read = self.read
        read.ensure_aligned()
        return read.reference_contexts[self.offset]


class SequencedRead:
    """An aligned or unaligned read whose record has passed validation.

    Parameters
    ----------
    record:
        The raw record. It is kept by reference and never modified.

    Raises
    ------
    InvalidReadError
        If the record is inconsistent, or anything else goes wrong while
        checking it. The underlying exception is chained as ``__cause__``.
    """

    def __init__(self, record: ReadRecord) -> None:
        object.__setattr__(self, "_record", record)
        try:
            _validate(record)
        except Exception as exc:
            name = getattr(record, "read_name", None)
            msg = f'Error "{exc}" while constructing read from record {name!r}'
            logger.debug(msg)
            raise InvalidReadError(msg, record) from exc

    @classmethod
    def from_record(cls, record: ReadRecord) -> "SequencedRead":
        return cls(record)

    def __setattr__(self, key: str, value: object) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, key: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __reduce__(self):
        # caches (and the weakly referenced residues) are rebuilt on the other side
        return (self.__class__, (self._record,))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SequencedRead):
            return NotImplemented
        return self._record == other._record

    def __hash__(self) -> int:
        return hash(self._record)

    def __len__(self) -> int:
        return len(self.sequence)

    def __repr__(self) -> str:
        return f"SequencedRead(name={self.name!r}, length={len(self)}, aligned={self.is_aligned})"

    @property
    def record(self) -> ReadRecord:
        return self._record

    # -- whole-read properties -------------------------------------------------

    @cached_property
    def name(self) -> str:
        return self._record.read_name

    @cached_property
    def sequence(self) -> str:
        return str(self._record.sequence)

    @cached_property
    def read_group(self) -> Optional[str]:
        return self._record.record_group_name

    @cached_property
    def is_aligned(self) -> bool:
        return bool(self._record.read_mapped)

    def ensure_aligned(self) -> bool:
        """Return True, or raise NotAlignedError if the read is unaligned."""
        if not self.is_aligned:
            raise NotAlignedError("Read has not been aligned to a reference")
        return True

    @cached_property
    def is_primary_alignment(self) -> bool:
        return self.is_aligned and bool(self._record.primary_alignment)

    @cached_property
    def is_duplicate(self) -> bool:
        return bool(self._record.duplicate_read)

    @cached_property
    def is_paired(self) -> bool:
        return bool(self._record.read_paired)

    @cached_property
    def is_first_of_pair(self) -> bool:
        return self.is_paired and not self._record.second_of_pair

    @cached_property
    def is_second_of_pair(self) -> bool:
        return self.is_paired and bool(self._record.second_of_pair)

    @cached_property
    def is_negative_read(self) -> bool:
        return bool(self._record.read_negative_strand)

    @cached_property
    def is_canonical_record(self) -> bool:
        # the one record that stands for this physical read
        return self.is_primary_alignment and not self.is_duplicate

    @cached_property
    def passed_quality_checks(self) -> bool:
        return not self._record.failed_vendor_quality_checks

    @cached_property
    def mapping_quality(self) -> Optional[int]:
        return _translate_mapq(self._record.mapq)

    @cached_property
    def alignment_quality(self) -> Optional[QualityScore]:
        self.ensure_aligned()
        if self.mapping_quality is None:
            return None
        return QualityScore(self.mapping_quality)

    @cached_property
    def quality_scores(self) -> Tuple[QualityScore, ...]:
        return tuple(QualityScore(int(q)) for q in self._record.qualities)

    @cached_property
    def error_probabilities(self) -> np.ndarray:
        probs = phred_to_error_probs(self._record.qualities)
        probs.setflags(write=False)
        return probs

    # -- alignment ---------------------------------------------------------------

    @cached_property
    def reference_positions(self) -> Tuple[Optional[ReferencePosition], ...]:
        return tuple(reference_positions(self._record))

    @cached_property
    def reference_contexts(self) -> Tuple[Optional[ReferenceSequenceContext], ...]:
        return tuple(reference_contexts(self._record, self.mismatches_option))

    @cached_property
    def mismatches_option(self) -> Optional[MismatchAnnotation]:
        return MismatchAnnotation.from_record(self._record)

    @property
    def mismatches(self) -> MismatchAnnotation:
        md = self.mismatches_option
        if md is None:
            raise MissingAnnotationError("Read has no MD tag")
        return md

    def mismatch_verdict(self, offset: int) -> MismatchVerdict:
        """MD verdict for the base at ``offset``.

        There is no verdict for bases without a reference position, nor for
        reads that carry no MD tag.
        """
        pos = self.reference_positions[offset]
        md = self.mismatches_option
        if pos is None or md is None:
            return MismatchVerdict.NO_VERDICT
        return md.verdict_at(pos.pos)

    @cached_property
    def residues(self) -> Tuple[Residue, ...]:
        return tuple(Residue(self, offset) for offset in range(len(self.sequence)))
