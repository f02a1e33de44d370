"""Read filtering by quality, length, complexity and index, plus quality cutting."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from readprep.fastqreader import Read
from readprep.filterresult import FilterResultType

PHRED_OFFSET = 33


@dataclass
class QualityFilterOptions:
    enabled: bool = True
    qualified_quality: int = 15
    unqualified_percent_limit: int = 40
    n_base_limit: int = 5
    avg_qual_req: int = 0


@dataclass
class LengthFilterOptions:
    enabled: bool = True
    required_length: int = 15
    max_length: int = 0


@dataclass
class ComplexityFilterOptions:
    enabled: bool = False
    threshold: float = 0.3


@dataclass
class QualityCutOptions:
    enabled_front: bool = False
    enabled_tail: bool = False
    enabled_right: bool = False
    window_size_front: int = 4
    quality_front: int = 20
    window_size_tail: int = 4
    quality_tail: int = 20
    window_size_right: int = 4
    quality_right: int = 20

    @property
    def any_enabled(self) -> bool:
        return self.enabled_front or self.enabled_tail or self.enabled_right


@dataclass
class IndexFilterOptions:
    enabled: bool = False
    blacklist1: list[str] = field(default_factory=list)
    blacklist2: list[str] = field(default_factory=list)
    threshold: int = 0


@dataclass
class FilterOptions:
    quality_filter: QualityFilterOptions = field(default_factory=QualityFilterOptions)
    length_filter: LengthFilterOptions = field(default_factory=LengthFilterOptions)
    complexity_filter: ComplexityFilterOptions = field(default_factory=ComplexityFilterOptions)
    quality_cut: QualityCutOptions = field(default_factory=QualityCutOptions)
    index_filter: IndexFilterOptions = field(default_factory=IndexFilterOptions)


def match(blacklist: Iterable[str], target: str, threshold: int) -> bool:
    """Whether target differs from some blacklist entry in at most threshold positions."""
    for entry in blacklist:
        diff = 0
        for a, b in zip(entry, target):
            if a != b:
                diff += 1
                if diff > threshold:
                    break
        if diff <= threshold:
            return True
    return False


class Filter:
    """Applies the configured filters and quality cutting to reads."""

    def __init__(self, options: FilterOptions | None = None):
        self.options = options if options is not None else FilterOptions()

    def pass_filter(self, read: Read | None) -> FilterResultType:
        """Classify a read as passing or the reason it fails."""
        if read is None or len(read.seq) == 0:
            return FilterResultType.FAIL_LENGTH
        opt = self.options
        qf = opt.quality_filter
        lf = opt.length_filter
        rlen = len(read.seq)
        low_qual = 0
        n_bases = 0
        total_qual = 0
        if qf.enabled or lf.enabled:
            qualified = PHRED_OFFSET + qf.qualified_quality
            for base, qual in zip(read.seq, read.quality):
                code = ord(qual)
                total_qual += code - PHRED_OFFSET
                if code < qualified:
                    low_qual += 1
                if base == "N":
                    n_bases += 1

        if qf.enabled:
            if low_qual > qf.unqualified_percent_limit * rlen / 100.0:
                return FilterResultType.FAIL_QUALITY
            if qf.avg_qual_req > 0 and int(total_qual / rlen) < qf.avg_qual_req:
                return FilterResultType.FAIL_QUALITY
            if n_bases > qf.n_base_limit:
                return FilterResultType.FAIL_N_BASE

        if lf.enabled:
            if rlen < lf.required_length:
                return FilterResultType.FAIL_LENGTH
            if lf.max_length > 0 and rlen > lf.max_length:
                return FilterResultType.FAIL_TOO_LONG

        if opt.complexity_filter.enabled and not self.pass_low_complexity_filter(read):
            return FilterResultType.FAIL_COMPLEXITY

        return FilterResultType.PASS_FILTER

    def pass_low_complexity_filter(self, read: Read) -> bool:
        """Whether enough adjacent base pairs differ."""
        seq = read.seq
        if len(seq) <= 1:
            return False
        diff = sum(1 for a, b in zip(seq, seq[1:]) if a != b)
        return diff / (len(seq) - 1) >= self.options.complexity_filter.threshold

    def trim_and_cut(self, read: Read, front: int, tail: int) -> tuple[Read | None, int]:
        """Trim fixed bases and cut by sliding-window quality.

        Returns the read (modified in place) and how many bases were removed
        from its front, or (None, 0) when nothing usable remains.
        """
        qc = self.options.quality_cut
        if front == 0 and tail == 0 and not qc.any_enabled:
            return read, 0

        rlen = len(read.seq) - front - tail
        if rlen < 0:
            return None, 0

        if not qc.any_enabled:
            if front == 0:
                read.seq = read.seq[:rlen]
                read.quality = read.quality[:rlen]
                return read, 0
            read.seq = read.seq[front:front + rlen]
            read.quality = read.quality[front:front + rlen]
            return read, front

        length = len(read.seq)
        quals = [ord(q) for q in read.quality]
        seq = read.seq

        if qc.enabled_front:
            w = qc.window_size_front
            if length - front - tail - w <= 0:
                return None, 0
            threshold = PHRED_OFFSET + qc.quality_front
            total = sum(quals[front:front + w - 1])
            s = front
            while s + w < length - tail:
                total += quals[s + w - 1]
                if s > front:
                    total -= quals[s - 1]
                if total / w >= threshold:
                    break
                s += 1
            if s > 0:
                s = s + w - 1
            while s < length and seq[s] == "N":
                s += 1
            front = s
            rlen = length - front - tail

        if qc.enabled_right:
            w = qc.window_size_right
            if length - front - tail - w <= 0:
                return None, 0
            threshold = PHRED_OFFSET + qc.quality_right
            total = sum(quals[front:front + w - 1])
            found_low = False
            s = front
            while s + w < length - tail:
                total += quals[s + w - 1]
                if s > front:
                    total -= quals[s - 1]
                if total / w < threshold:
                    found_low = True
                    break
                s += 1
            if found_low:
                while s < length - 1 and quals[s] >= threshold:
                    s += 1
                rlen = s - front

        if not qc.enabled_right and qc.enabled_tail:
            w = qc.window_size_tail
            if length - front - tail - w <= 0:
                return None, 0
            threshold = PHRED_OFFSET + qc.quality_tail
            last = length - tail - 1
            total = sum(quals[last - i] for i in range(w - 1))
            t = last
            while t - w >= front:
                total += quals[t - w + 1]
                if t < last:
                    total -= quals[t + 1]
                if total / w >= threshold:
                    break
                t -= 1
            if t < length - 1:
                t = t - w + 1
            while t >= 0 and seq[t] == "N":
                t -= 1
            rlen = t - front + 1

        if rlen <= 0 or front >= length - 1:
            return None, 0

        read.seq = read.seq[front:front + rlen]
        read.quality = read.quality[front:front + rlen]
        return read, front

    def filter_by_index(self, index1: str, index2: str | None = None) -> bool:
        """Whether the read (pair) should be dropped for a blacklisted index."""
        idx = self.options.index_filter
        if not idx.enabled:
            return False
        if match(idx.blacklist1, index1, idx.threshold):
            return True
        if index2 is not None and match(idx.blacklist2, index2, idx.threshold):
            return True
        return False