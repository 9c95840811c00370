import pytest

from readresidue.bulk import reads_from_records, records_from_reads
from readresidue.config import BulkOptions
from readresidue.errors import InvalidReadError
from readresidue.models import ReadRecord
from readresidue.read import SequencedRead


def make_records(n: int) -> list[ReadRecord]:
    return [
        ReadRecord(
            read_name=f"r{i}",
            sequence="ACGT",
            qualities=(30, 31, 32, 33),
            read_mapped=True,
            primary_alignment=True,
            start=i * 10,
            mapq=60,
            reference_name="chr1",
            cigar="4M",
            md_tag="4",
        )
        for i in range(n)
    ]


def test_reads_from_records_preserves_order() -> None:
    records = make_records(5)
    reads = reads_from_records(records)
    assert [r.name for r in reads] == [f"r{i}" for i in range(5)]
    assert all(isinstance(r, SequencedRead) for r in reads)


def test_round_trip() -> None:
    records = make_records(3)
    reads = reads_from_records(records)
    back = records_from_reads(reads)
    assert back == records
    assert reads_from_records(back) == reads


def test_one_bad_record_fails_everything() -> None:
    records = make_records(3)
    records.insert(1, ReadRecord("bad", "ACGTA", (1, 2, 3, 4)))
    with pytest.raises(InvalidReadError, match="'bad'"):
        reads_from_records(records)


def test_progress_and_generators() -> None:
    reads = reads_from_records((r for r in make_records(4)), BulkOptions(progress=True))
    assert len(reads) == 4


def test_worker_pool() -> None:
    records = make_records(20)
    reads = reads_from_records(records, BulkOptions(workers=2, chunk_size=3))
    assert records_from_reads(reads) == records


def test_worker_pool_propagates_invalid_read() -> None:
    records = make_records(6)
    records.append(ReadRecord("bad", "ACGT", (1, 2, 3, 4), primary_alignment=True))
    with pytest.raises(InvalidReadError, match="primary alignment") as exc:
        reads_from_records(records, BulkOptions(workers=2, chunk_size=2))
    assert exc.value.record.read_name == "bad"


@pytest.mark.parametrize("opts", [BulkOptions(workers=0), BulkOptions(chunk_size=0)])
def test_bad_options(opts: BulkOptions) -> None:
    with pytest.raises(ValueError):
        reads_from_records(make_records(1), opts)
