"""Decoding of the SAM ``MD`` auxiliary field.

The MD string describes the reference under the aligned (M/=/X and D) part of a
read: runs of matching bases, single mismatched reference bases, and deleted
reference bases prefixed with ``^``. For example ``10A5^AC6`` means 10 matches,
a reference ``A`` read as something else, 5 matches, ``AC`` deleted from the
read, then 6 matches.

Insertions and clips are invisible to MD, so a read offset inside them gets no
verdict at all.
"""

from __future__ import annotations

import bisect
import enum
import re
from dataclasses import dataclass
from functools import cached_property
from typing import Dict, List, Mapping, Optional, Tuple

from .models import ReadRecord

_MD_FULL_RE = re.compile(r"^[0-9]+(([A-Z]|\^[A-Z]+)[0-9]+)*$")
_MD_TOKEN_RE = re.compile(r"(\d+)|\^([A-Z]+)|([A-Z])")


class MismatchVerdict(enum.Enum):
    MATCH = "match"
    MISMATCH = "mismatch"
    NO_VERDICT = "no_verdict"


@dataclass(frozen=True)
class MismatchAnnotation:
    """Parsed MD tag, in 0-based reference coordinates.

    ``mismatches`` and ``deletions`` are sorted ``(position, reference base)``
    pairs.
    """

    start: int
    matches: Tuple[Tuple[int, int], ...]  # half-open [start, end) ranges, sorted
    mismatches: Tuple[Tuple[int, str], ...] = ()
    deletions: Tuple[Tuple[int, str], ...] = ()

    @classmethod
    def parse(cls, md: str, start: int) -> "MismatchAnnotation":
        """Parse an MD string for an alignment starting at ``start``.

        Raises ValueError for strings that are not valid MD.
        """
        md = md.upper()
        if not _MD_FULL_RE.match(md):
            raise ValueError(f"Malformed MD tag: {md!r}")

        matches: List[Tuple[int, int]] = []
        mismatches: Dict[int, str] = {}
        deletions: Dict[int, str] = {}

        pos = start
        for run, deleted, mismatch in _MD_TOKEN_RE.findall(md):
            if run:
                n = int(run)
                if n > 0:
                    matches.append((pos, pos + n))
                pos += n
            elif deleted:
                for i, base in enumerate(deleted):
                    deletions[pos + i] = base
                pos += len(deleted)
            else:
                mismatches[pos] = mismatch
                pos += 1

        return cls(
            start=start,
            matches=tuple(matches),
            mismatches=tuple(sorted(mismatches.items())),
            deletions=tuple(sorted(deletions.items())),
        )

    @classmethod
    def from_record(cls, record: ReadRecord) -> Optional["MismatchAnnotation"]:
        """Annotation for an aligned record carrying MD, else None."""
        if not record.read_mapped or record.md_tag is None or record.start is None:
            return None
        return cls.parse(record.md_tag, int(record.start))

    @cached_property
    def _mismatch_lookup(self) -> Mapping[int, str]:
        return dict(self.mismatches)

    @cached_property
    def _deletion_lookup(self) -> Mapping[int, str]:
        return dict(self.deletions)

    @property
    def end(self) -> int:
        """Exclusive reference end covered by the tag."""
        last = self.start
        if self.matches:
            last = max(last, self.matches[-1][1])
        if self.mismatches:
            last = max(last, self.mismatches[-1][0] + 1)
        if self.deletions:
            last = max(last, self.deletions[-1][0] + 1)
        return last

    @property
    def has_mismatches(self) -> bool:
        return bool(self.mismatches)

    @property
    def count_of_mismatches(self) -> int:
        return len(self.mismatches)

    def is_match(self, pos: int) -> bool:
        i = bisect.bisect_right(self.matches, (pos, float("inf"))) - 1
        return i >= 0 and self.matches[i][0] <= pos < self.matches[i][1]

    def mismatched_base(self, pos: int) -> Optional[str]:
        """Reference base at a mismatching position."""
        return self._mismatch_lookup.get(pos)

    def deleted_base(self, pos: int) -> Optional[str]:
        return self._deletion_lookup.get(pos)

    def verdict_at(self, pos: int) -> MismatchVerdict:
        """Verdict for a reference position covered by read bases."""
        if pos in self._mismatch_lookup:
            return MismatchVerdict.MISMATCH
        if self.is_match(pos):
            return MismatchVerdict.MATCH
        return MismatchVerdict.NO_VERDICT

    def __str__(self) -> str:
        # re-encode in canonical MD form
        parts: List[str] = []
        run = 0
        pos = self.start
        end = self.end
        mismatches = self._mismatch_lookup
        deletions = self._deletion_lookup
        while pos < end:
            if pos in mismatches:
                parts.append(f"{run}{mismatches[pos]}")
                run = 0
                pos += 1
            elif pos in deletions:
                deleted = []
                while pos in deletions:
                    deleted.append(deletions[pos])
                    pos += 1
                parts.append(f"{run}^{''.join(deleted)}")
                run = 0
            else:
                run += 1
                pos += 1
        parts.append(str(run))
        return "".join(parts)
