import pytest

from readprep.duplicate import Duplicate
from readprep.fastqreader import Read


def _read(seq):
    return Read("@r", seq, "+", "I" * len(seq))


def test_seq2int_encodes_in_base_order():
    dup = Duplicate()
    assert dup.seq2int("AAAA", 0, 4) == 0
    values = [dup.seq2int(s, 0, 4) for s in ("AAAA", "AAAT", "AAAC", "AAAG")]
    assert values == sorted(values)
    assert len(set(values)) == 4


def test_seq2int_invalid_base():
    assert Duplicate().seq2int("ACNT", 0, 4) is None


def test_seq2int_uses_offset():
    dup = Duplicate()
    assert dup.seq2int("NNACGT", 2, 4) == dup.seq2int("ACGT", 0, 4)


def test_identical_reads_are_duplicates():
    dup = Duplicate()
    for _ in range(3):
        dup.stat_read(_read("ACGT" * 10))
    rate, hist, _ = dup.stat_all(5)
    assert rate == pytest.approx(2 / 3)
    assert hist[3] == 1
    assert sum(hist) == 1


def test_short_and_invalid_reads_ignored():
    dup = Duplicate()
    dup.stat_read(_read("ACGT" * 7))
    dup.stat_read(_read("N" + "ACGT" * 10))
    rate, hist, _ = dup.stat_all(4)
    assert rate == 0.0
    assert hist == [0, 0, 0, 0]


def test_add_record_keeps_smallest_kmer():
    dup = Duplicate()
    dup.add_record(5, 100, 10)
    dup.add_record(5, 200, 20)
    dup.add_record(5, 100, 10)
    _, hist, _ = dup.stat_all(4)
    assert hist[2] == 1
    dup.add_record(5, 50, 30)
    rate, hist, _ = dup.stat_all(4)
    assert hist[1] == 1 and hist[2] == 0
    assert rate == 0.0


def test_large_counts_go_to_last_bin():
    dup = Duplicate()
    for _ in range(5):
        dup.add_record(1, 7, 0)
    _, hist, _ = dup.stat_all(3)
    assert hist[2] == 1


def test_count_wraps_like_sixteen_bit_counter():
    dup = Duplicate()
    for _ in range(65536):
        dup.add_record(9, 1, 0)
    rate, hist, _ = dup.stat_all(3)
    assert rate == 0.0
    assert sum(hist) == 0


def test_pair_gc_ratio():
    dup = Duplicate()
    dup.stat_pair(_read("G" * 40), _read("C" * 40))
    _, _, mean_gc = dup.stat_all(3)
    assert mean_gc[1] == pytest.approx(1.0)


def test_single_read_gc_counts_c_and_t():
    dup = Duplicate()
    dup.stat_read(_read("T" * 40))
    dup.stat_read(_read("A" * 40))
    _, hist, mean_gc = dup.stat_all(3)
    assert hist[1] == 2
    assert 0.0 <= mean_gc[1] <= 1.0
    assert mean_gc[1] == pytest.approx(0.5)