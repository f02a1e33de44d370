"""Sampling an input file to estimate read length, read count, adapters and hot sequences."""

from __future__ import annotations

import sys
from collections import Counter
from typing import Iterator, Mapping

from readprep.fastqreader import FastqReader, Read
from readprep.nucleotidetree import NucleotideTree

_BASE_CODE = {"A": 0, "T": 1, "C": 2, "G": 3}
_BASES = "ATCG"
TWO_COLOR_PREFIXES = ("@NS", "@NB", "@NDX", "@A0")
SEQ_LEN_SAMPLE = 1000
OVER_REP_BASE_LIMIT = 151 * 10000
READ_NUM_READ_LIMIT = 512 * 1024
READ_NUM_BASE_LIMIT = 151 * 512 * 1024
ADAPTER_READ_LIMIT = 256 * 1024
ADAPTER_BASE_LIMIT = 151 * ADAPTER_READ_LIMIT
ADAPTER_MIN_RECORDS = 10000
ADAPTER_KEYLEN = 10
ADAPTER_TOP_NUM = 10
FOLD_THRESHOLD = 20
SEED_START = 20
MAX_ADAPTER_LEN = 60


def int2seq(val: int, seqlen: int) -> str:
    """Decode a 2-bit packed value into a sequence of seqlen bases."""
    bases = []
    for _ in range(seqlen):
        bases.append(_BASES[val & 0x03])
        val >>= 2
    return "".join(reversed(bases))


def seq2int(seq: str, pos: int, keylen: int, last_val: int | None = None) -> int | None:
    """2-bit encoding of seq[pos:pos+keylen]; None if it holds a non-ACGT base.

    With last_val (the key at pos - 1) only the newly entering base is read.
    """
    if last_val is not None and last_val >= 0:
        mask = (1 << (keylen * 2)) - 1
        code = _BASE_CODE.get(seq[pos + keylen - 1])
        if code is None:
            return None
        return ((last_val << 2) & mask) + code
    key = 0
    for base in seq[pos:pos + keylen]:
        code = _BASE_CODE.get(base)
        if code is None:
            return None
        key = (key << 2) + code
    return key


def match_known_adapter(seq: str, known_adapters: Mapping[str, str]) -> str:
    """The first known adapter (in sorted order) that seq starts with, or ""."""
    for adapter in sorted(known_adapters):
        if len(seq) >= len(adapter) and seq.startswith(adapter):
            return adapter
    return ""


def compute_seq_len(filename) -> int:
    """Longest read among the first reads of the file."""
    longest = 0
    with FastqReader(filename) as reader:
        for records, read in enumerate(reader):
            if records >= SEQ_LEN_SAMPLE:
                break
            longest = max(longest, len(read.seq))
    return longest


def _substrings(seq: str, step: int) -> Iterator[str]:
    for i in range(len(seq) - step):
        yield seq[i:] if step < 0 else seq[i:i + step]


def _is_hot(seq: str, count: int, seq_len: int) -> bool:
    length = len(seq)
    if seq_len >= 1 and length >= seq_len - 1:
        return count >= 3
    if length >= 100:
        return count >= 5
    if length >= 40:
        return count >= 20
    if length >= 20:
        return count >= 100
    if length >= 10:
        return count >= 500
    return False


def compute_over_rep_seq(filename, seq_len: int) -> dict[str, int]:
    """Overrepresented subsequences of a sample of the file, with their counts."""
    counts: Counter[str] = Counter()
    bases = 0
    steps = (10, 20, 40, 100, min(150, seq_len - 2))
    with FastqReader(filename) as reader:
        while bases < OVER_REP_BASE_LIMIT:
            read = reader.read()
            if read is None:
                break
            bases += len(read.seq)
            for step in steps:
                counts.update(_substrings(read.seq, step))

    hot = {seq: counts[seq] for seq in sorted(counts) if _is_hot(seq, counts[seq], seq_len)}

    # drop sequences contained in a comparably frequent longer one
    for seq in list(hot):
        count = hot[seq]
        if any(
            seq != other and seq in other and count // other_count < 10
            for other, other_count in hot.items()
        ):
            del hot[seq]
    return hot


def _sample_reads(
    filename, read_limit: int, base_limit: int, keep: bool
) -> tuple[list[Read], int, int]:
    """Read up to the limits; returns (kept reads, records read, estimated read count)."""
    reads: list[Read] = []
    records = 0
    bases = 0
    first_pos = 0
    reached_eof = False
    with FastqReader(filename) as reader:
        while records < read_limit and bases < base_limit:
            read = reader.read()
            if read is None:
                reached_eof = True
                break
            if records == 0:
                first_pos, _ = reader.get_bytes()
            records += 1
            bases += len(read.seq)
            if keep:
                reads.append(read)
        if reached_eof:
            read_num = records
        elif records > 0:
            consumed, total = reader.get_bytes()
            per_read = (consumed - first_pos) / records
            # raised by 1%: the estimate tends to be low on compressed input
            read_num = int(total * 1.01 / per_read) if per_read > 0 else records
        else:
            read_num = 0
    return reads, records, read_num


def _rolling_keys(seq: str, keylen: int, shift_tail: int) -> Iterator[tuple[int, int]]:
    key: int | None = None
    for pos in range(SEED_START, len(seq) - keylen - shift_tail + 1):
        key = seq2int(seq, pos, keylen, key)
        if key is not None:
            yield pos, key


def _is_seed_candidate(key: int, keylen: int) -> bool:
    atcg = [0, 0, 0, 0]
    for i in range(keylen):
        atcg[(key >> (i * 2)) & 0x03] += 1
    if max(atcg) >= keylen - 4:
        return False
    if atcg[2] + atcg[3] >= keylen - 2:
        return False
    # starts with GGGG
    return key >> 12 != 0xFF


def _adjacent_diffs(seq: str) -> int:
    return sum(1 for a, b in zip(seq, seq[1:]) if a != b)


class Evaluator:
    """Inspects the input files before processing to pick sensible settings."""

    def __init__(
        self,
        in1,
        in2=None,
        trim_tail1: int = 0,
        known_adapters: Mapping[str, str] | None = None,
    ):
        self.in1 = in1
        self.in2 = in2
        self.trim_tail1 = trim_tail1
        self.known_adapters: Mapping[str, str] = known_adapters or {}
        self.seq_len1 = 0
        self.seq_len2 = 0
        self.over_rep_seqs1: dict[str, int] = {}
        self.over_rep_seqs2: dict[str, int] = {}

    @property
    def _shift_tail(self) -> int:
        # the last cycle is noisy, so at least one base is always left out
        return max(1, self.trim_tail1)

    def is_two_color_system(self) -> bool:
        """Whether the first read name looks like a NextSeq/NovaSeq instrument."""
        with FastqReader(self.in1) as reader:
            read = reader.read()
        return read is not None and read.name.startswith(TWO_COLOR_PREFIXES)

    def evaluate_seq_len(self) -> tuple[int, int]:
        """Set and return the read lengths of both inputs."""
        if self.in1:
            self.seq_len1 = compute_seq_len(self.in1)
        if self.in2:
            self.seq_len2 = compute_seq_len(self.in2)
        return self.seq_len1, self.seq_len2

    def evaluate_over_rep_seqs(self) -> tuple[dict[str, int], dict[str, int]]:
        """Set and return the overrepresented sequences of both inputs."""
        if self.in1:
            self.over_rep_seqs1 = compute_over_rep_seq(self.in1, self.seq_len1)
        if self.in2:
            self.over_rep_seqs2 = compute_over_rep_seq(self.in2, self.seq_len2)
        return self.over_rep_seqs1, self.over_rep_seqs2

    def evaluate_read_num(self) -> int:
        """Estimated number of reads in read1's input."""
        _, _, read_num = _sample_reads(
            self.in1, READ_NUM_READ_LIMIT, READ_NUM_BASE_LIMIT, keep=False
        )
        return read_num

    def eval_adapter_and_read_num(self, is_r2: bool = False) -> tuple[str, int]:
        """Detect the adapter of one input; returns (adapter or "", estimated read count)."""
        filename = self.in2 if is_r2 else self.in1
        reads, records, read_num = _sample_reads(
            filename, ADAPTER_READ_LIMIT, ADAPTER_BASE_LIMIT, keep=True
        )
        if records < ADAPTER_MIN_RECORDS:
            return "", read_num

        keylen = ADAPTER_KEYLEN
        size = 1 << (keylen * 2)
        shift_tail = self._shift_tail
        counts: Counter[int] = Counter()
        for read in reads:
            counts.update(key for _, key in _rolling_keys(read.seq, keylen, shift_tail))
        counts.pop(0, None)

        candidates = [k for k in counts if _is_seed_candidate(k, keylen)]
        total = sum(counts[k] for k in candidates)
        top = sorted(candidates, key=lambda k: (-counts[k], -k))[:ADAPTER_TOP_NUM]

        for key in top:
            count = counts[key]
            if count < 10 or count * size < total * FOLD_THRESHOLD:
                break
            if _adjacent_diffs(int2seq(key, keylen)) < 3:
                continue
            adapter = self._adapter_with_seed(key, reads, keylen)
            if adapter:
                return adapter, read_num
        return "", read_num

    def _adapter_with_seed(self, seed: int, reads: list[Read], keylen: int) -> str:
        shift_tail = self._shift_tail
        forward = NucleotideTree()
        backward = NucleotideTree()
        for read in reads:
            seq = read.seq
            for pos, key in _rolling_keys(seq, keylen, shift_tail):
                if key == seed:
                    forward.add_seq(seq[pos + keylen:len(seq) - shift_tail])
                    backward.add_seq(seq[:pos][::-1])
        forward_path, forward_leaf = forward.get_dominant_path()
        backward_path, backward_leaf = backward.get_dominant_path()
        reached_leaf = forward_leaf and backward_leaf

        adapter = backward_path[::-1] + int2seq(seed, keylen) + forward_path
        adapter = adapter[:MAX_ADAPTER_LEN]

        matched = match_known_adapter(adapter, self.known_adapters)
        if matched:
            print(self.known_adapters[matched], file=sys.stderr)
            print(matched, file=sys.stderr)
            return matched
        if reached_leaf:
            print(adapter, file=sys.stderr)
            return adapter
        return ""