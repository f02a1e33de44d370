import random

import pytest

from readprep.evaluator import (
    Evaluator,
    compute_over_rep_seq,
    compute_seq_len,
    int2seq,
    match_known_adapter,
    seq2int,
)

LONG_ADAPTER = "AGATCGGAAGAGCACACGTCTGAACTCCAGTCACTTGTAATCTCGTATGCCGTCTTCTGCTTG"
KNOWN = LONG_ADAPTER[:33]


def _write_fastq(path, records):
    with open(path, "w") as fh:
        for name, seq in records:
            fh.write(f"{name}\n{seq}\n+\n{'E' * len(seq)}\n")
    return path


@pytest.fixture(scope="module")
def adapter_file(tmp_path_factory):
    rng = random.Random(7)
    records = []
    for i in range(10000):
        insert = "".join(rng.choice("ACGT") for _ in range(rng.randint(25, 40)))
        records.append((f"@r{i}", (insert + LONG_ADAPTER)[:80]))
    return _write_fastq(tmp_path_factory.mktemp("ad") / "reads.fq", records)


def test_int2seq_seq2int_round_trip():
    s = "ATCGATCGAT"
    assert int2seq(seq2int(s, 0, 10), 10) == s


def test_seq2int_rejects_n():
    assert seq2int("ACGTNACGTA", 0, 10) is None


def test_seq2int_rolling_matches_fresh():
    seq = "ACGTTGCAAGGCTTACCGAT"
    prev = seq2int(seq, 0, 10)
    for pos in range(1, len(seq) - 9):
        prev = seq2int(seq, pos, 10, prev)
        assert prev == seq2int(seq, pos, 10)


def test_int2seq_zero_is_all_a():
    assert int2seq(0, 5) == "AAAAA"


def test_match_known_adapter():
    known = {KNOWN: "Illumina TruSeq"}
    assert match_known_adapter(LONG_ADAPTER, known) == KNOWN
    assert match_known_adapter(KNOWN[:-1], known) == ""
    assert match_known_adapter("C" + KNOWN, known) == ""


def test_compute_seq_len(tmp_path):
    path = _write_fastq(tmp_path / "a.fq", [("@a", "ACGT"), ("@b", "ACGTACGTAC"), ("@c", "AC")])
    assert compute_seq_len(path) == len("ACGTACGTAC")


def test_evaluate_seq_len_single_end(tmp_path):
    path = _write_fastq(tmp_path / "a.fq", [("@a", "ACGTAC")])
    ev = Evaluator(path)
    assert ev.evaluate_seq_len() == (6, 0)
    assert ev.seq_len1 == 6


def test_two_color_system(tmp_path):
    yes = _write_fastq(tmp_path / "y.fq", [("@NB551:1:x", "ACGT")])
    no = _write_fastq(tmp_path / "n.fq", [("@SRR1.1", "ACGT")])
    empty = _write_fastq(tmp_path / "e.fq", [])
    assert Evaluator(yes).is_two_color_system() is True
    assert Evaluator(no).is_two_color_system() is False
    assert Evaluator(empty).is_two_color_system() is False


def test_evaluate_read_num_small_file(tmp_path):
    path = _write_fastq(tmp_path / "a.fq", [(f"@r{i}", "ACGTACGT") for i in range(37)])
    assert Evaluator(path).evaluate_read_num() == 37


def test_over_rep_keeps_longest(tmp_path):
    read = "ACGTTGCAAGGCTTACCGATGACTAGCATG"
    path = _write_fastq(tmp_path / "a.fq", [(f"@r{i}", read) for i in range(200)])
    hot = compute_over_rep_seq(path, len(read))
    assert hot == {read[0:28]: 200, read[1:29]: 200}


def test_evaluate_over_rep_seqs_uses_seq_len(tmp_path):
    read = "ACGTTGCAAGGCTTACCGATGACTAGCATG"
    path = _write_fastq(tmp_path / "a.fq", [(f"@r{i}", read) for i in range(200)])
    ev = Evaluator(path)
    ev.evaluate_seq_len()
    hot1, hot2 = ev.evaluate_over_rep_seqs()
    assert hot1 == compute_over_rep_seq(path, len(read))
    assert hot2 == {}


def test_adapter_detection_too_few_reads(tmp_path):
    path = _write_fastq(tmp_path / "a.fq", [(f"@r{i}", "ACGT" * 20) for i in range(50)])
    assert Evaluator(path).eval_adapter_and_read_num(False) == ("", 50)


def test_adapter_detection_known(adapter_file):
    ev = Evaluator(adapter_file, known_adapters={KNOWN: "Illumina TruSeq"})
    adapter, read_num = ev.eval_adapter_and_read_num(False)
    assert adapter == KNOWN
    assert read_num == 10000


def test_adapter_detection_unknown_needs_leaf(adapter_file):
    adapter, read_num = Evaluator(adapter_file).eval_adapter_and_read_num(False)
    assert adapter == ""
    assert read_num == 10000