from __future__ import annotations

from dataclasses import dataclass

from .utils import phred_to_error_prob


@dataclass(frozen=True, order=True)
class QualityScore:
    """A Phred-scaled quality value (base quality or mapping quality)."""

    phred: int

    @property
    def error_probability(self) -> float:
        return phred_to_error_prob(self.phred)
