import pytest

from readresidue.cigar import parse_cigar, reference_contexts, reference_positions
from readresidue.mdtag import MismatchAnnotation
from readresidue.models import CigarElement, ReadRecord, ReferencePosition


def make_record(seq: str, cigar: str, start: int = 50, mapped: bool = True) -> ReadRecord:
    return ReadRecord(
        read_name="r",
        sequence=seq,
        qualities=tuple([30] * len(seq)),
        read_mapped=mapped,
        start=start,
        reference_name="chr2",
        cigar=cigar,
    )


def test_parse_cigar():
    assert parse_cigar("5S10M2I3M2D4M1H") == [
        CigarElement(5, "S"),
        CigarElement(10, "M"),
        CigarElement(2, "I"),
        CigarElement(3, "M"),
        CigarElement(2, "D"),
        CigarElement(4, "M"),
        CigarElement(1, "H"),
    ]
    assert parse_cigar("") == []
    assert parse_cigar("*") == []
    assert str(CigarElement(3, "=")) == "3="


@pytest.mark.parametrize("bad", ["M", "10", "5M3", "4Q", "3M 2I"])
def test_parse_cigar_malformed(bad: str):
    with pytest.raises(ValueError):
        parse_cigar(bad)


def test_positions_with_clips_and_skips():
    rec = make_record("AACCGGTT", "2H1S2=1X3N2M1I1P1S")
    positions = [p.pos if p is not None else None for p in reference_positions(rec)]
    # S, =, =, X, N(skip 3), M, M, I, P, S
    assert positions == [None, 50, 51, 52, 56, 57, None, None]
    assert reference_positions(rec)[1] == ReferencePosition("chr2", 50)


def test_positions_unmapped():
    rec = make_record("ACGT", "4M", mapped=False)
    assert reference_positions(rec) == [None, None, None, None]


def test_positions_without_reference_name():
    rec = ReadRecord("r", "AC", (1, 1), read_mapped=True, start=0, cigar="2M")
    assert reference_positions(rec)[0] == ReferencePosition("*", 0)


def test_contexts():
    rec = make_record("ACGT", "1M1I2M")
    md = MismatchAnnotation.parse("1A1", 50)
    ctx = reference_contexts(rec, md)
    assert ctx[0].reference_base == "A"
    assert ctx[1] is None
    assert ctx[2].position == ReferencePosition("chr2", 51)
    assert ctx[2].reference_base == "A"
    assert ctx[2].cigar_element == CigarElement(2, "M")
    assert ctx[2].cigar_element_offset == 0
    assert ctx[3].reference_base == "T"
    assert ctx[3].cigar_element_offset == 1
