import pysam

from readresidue.models import ReadRecord
from readresidue.read import SequencedRead
from readresidue.segments import record_from_segment, segment_from_record


def make_header() -> pysam.AlignmentHeader:
    return pysam.AlignmentHeader.from_dict(
        {
            "HD": {"VN": "1.6"},
            "SQ": [{"SN": "chr1", "LN": 1000}],
            "RG": [{"ID": "rg1"}],
        }
    )


def make_segment(header: pysam.AlignmentHeader) -> pysam.AlignedSegment:
    a = pysam.AlignedSegment(header)
    a.query_name = "r1"
    a.query_sequence = "ACGTACGT"
    a.flag = 0
    a.reference_id = 0
    a.reference_start = 100
    a.mapping_quality = 60
    a.cigarstring = "3M1I4M"
    a.query_qualities = pysam.qualitystring_to_array("I" * 8)
    a.set_tag("MD", "1T5")
    a.set_tag("RG", "rg1")
    return a


def test_record_from_mapped_segment():
    header = make_header()
    seg = make_segment(header)
    seg.is_paired = True
    seg.is_read2 = True
    seg.is_reverse = True
    rec = record_from_segment(seg)
    assert rec.read_name == "r1"
    assert rec.sequence == "ACGTACGT"
    assert rec.qualities == (40,) * 8
    assert rec.read_mapped and rec.primary_alignment
    assert rec.start == 100
    assert rec.mapq == 60
    assert rec.reference_name == "chr1"
    assert rec.cigar == "3M1I4M"
    assert rec.md_tag == "1T5"
    assert rec.record_group_name == "rg1"
    assert rec.read_paired and rec.second_of_pair and not rec.first_of_pair
    assert rec.read_negative_strand

    read = SequencedRead(rec)
    assert read.is_second_of_pair
    assert read.residues[1].is_snp
    assert read.residues[3].is_insertion


def test_secondary_and_supplementary_are_not_primary():
    header = make_header()
    seg = make_segment(header)
    seg.is_secondary = True
    assert not record_from_segment(seg).primary_alignment

    seg = make_segment(header)
    seg.is_supplementary = True
    assert not record_from_segment(seg).primary_alignment


def test_unmapped_segment():
    a = pysam.AlignedSegment()
    a.query_name = "u1"
    a.query_sequence = "ACGT"
    a.flag = 4
    a.query_qualities = pysam.qualitystring_to_array("IIII")
    rec = record_from_segment(a)
    assert not rec.read_mapped
    assert not rec.primary_alignment
    assert rec.start is None
    assert rec.mapq is None
    assert rec.reference_name is None
    assert rec.cigar is None

    read = SequencedRead(rec)
    assert not read.is_aligned


def test_segment_round_trip():
    header = make_header()
    rec = record_from_segment(make_segment(header))
    assert record_from_segment(segment_from_record(rec, header)) == rec

    unmapped = ReadRecord("u1", "ACGT", (1, 2, 3, 4), read_paired=True, first_of_pair=True)
    assert record_from_segment(segment_from_record(unmapped)) == unmapped
