"""Duplication-rate estimation from read prefixes and 32-mers."""

from __future__ import annotations

import math
from dataclasses import dataclass

from readprep.fastqreader import Read

_BASE_CODE = {"A": 0, "T": 1, "C": 2, "G": 3}
_KMER_LEN = 32


@dataclass
class _Record:
    kmer: int
    count: int
    gc: int


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class Duplicate:
    """Keeps, for each prefix key, the smallest 32-mer seen and its count."""

    def __init__(self, key_len: int = 12):
        self.key_len = key_len
        self.key_space = 1 << (2 * key_len)
        self._records: dict[int, _Record] = {}

    def _count(self, key: int) -> int:
        record = self._records.get(key)
        return record.count if record else 0

    def seq2int(self, data: str, start: int, keylen: int) -> int | None:
        """2-bit encoding of data[start:start+keylen], or None on a non-ACGT base."""
        value = 0
        for base in data[start:start + keylen]:
            code = _BASE_CODE.get(base)
            if code is None:
                return None
            value = (value << 2) | code
        return value

    def add_record(self, key: int, kmer32: int, gc: int) -> None:
        record = self._records.get(key)
        if record is None or record.count == 0:
            self._records[key] = _Record(kmer32, 1, gc & 0xFF)
        elif record.kmer == kmer32:
            record.count = (record.count + 1) & 0xFFFF
        elif record.kmer > kmer32:
            record.kmer = kmer32
            record.count = 1
            record.gc = gc & 0xFF

    def stat_read(self, read: Read) -> None:
        """Record a single-end read of at least 32 bases."""
        length = len(read.seq)
        if length < _KMER_LEN:
            return
        data = read.seq
        key = self.seq2int(data, 0, self.key_len)
        if key is None:
            return
        kmer32 = self.seq2int(data, max(0, length - _KMER_LEN - 5), _KMER_LEN)
        if kmer32 is None:
            return
        gc = 0
        if self._count(key) == 0:
            gc = sum(1 for base in data if base in "CT")
        self.add_record(key, kmer32, _round_half_up(255.0 * gc / length))

    def stat_pair(self, r1: Read, r2: Read) -> None:
        """Record a pair keyed by read1's prefix and read2's first 32 bases."""
        if len(r1.seq) < _KMER_LEN or len(r2.seq) < _KMER_LEN:
            return
        key = self.seq2int(r1.seq, 0, self.key_len)
        if key is None:
            return
        kmer32 = self.seq2int(r2.seq, 0, _KMER_LEN)
        if kmer32 is None:
            return
        gc = 0
        if self._count(key) == 0:
            gc = sum(1 for base in r1.seq if base in "GC")
            gc += sum(1 for base in r2.seq if base in "GC")
        total = len(r1.seq) + len(r2.seq)
        self.add_record(key, kmer32, _round_half_up(255.0 * gc / total))

    def stat_all(self, hist_size: int) -> tuple[float, list[int], list[float]]:
        """Duplication rate, histogram of counts and mean GC ratio per bin."""
        hist = [0] * hist_size
        gc_sum = [0.0] * hist_size
        gc_num = [0] * hist_size
        total = 0
        dups = 0
        for _, record in sorted(self._records.items()):
            count = record.count
            if count <= 0:
                continue
            total += count
            dups += count - 1
            slot = min(count, hist_size - 1)
            hist[slot] += 1
            gc_sum[slot] += record.gc
            gc_num[slot] += 1
        mean_gc = [
            s / 255.0 / n if n > 0 else s for s, n in zip(gc_sum, gc_num)
        ]
        rate = dups / total if total else 0.0
        return rate, hist, mean_gc