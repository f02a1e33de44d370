"""Adapter trimming by paired-end overlap or by known adapter sequences."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from readprep.fastqreader import Read
from readprep.filterresult import FilterResult

ALLOW_ONE_MISMATCH_FOR_EACH = 8


@dataclass
class OverlapResult:
    """Outcome of aligning read1 against the reverse complement of read2."""

    overlapped: bool = False
    offset: int = 0
    overlap_len: int = 0
    diff: int = 0


def trim_by_overlap_analysis(
    r1: Read,
    r2: Read,
    fr: FilterResult | None,
    ov: OverlapResult,
    front_trimmed1: int = 0,
    front_trimmed2: int = 0,
) -> bool:
    """Cut both reads where the insert ends, when read ends run past each other."""
    if not (ov.overlapped and ov.offset < 0):
        return False
    len1 = min(len(r1.seq), ov.overlap_len + front_trimmed2)
    len2 = min(len(r2.seq), ov.overlap_len + front_trimmed1)
    adapter1 = r1.seq[len1:]
    adapter2 = r2.seq[len2:]
    r1.seq = r1.seq[:len1]
    r1.quality = r1.quality[:len1]
    r2.seq = r2.seq[:len2]
    r2.quality = r2.quality[:len2]
    if fr is not None:
        fr.add_paired_adapter_trimmed(adapter1, adapter2)
    return True


def _search_start(adapter_len: int) -> int:
    # Negative starts allow for an adapter dimer whose first bases were skipped.
    if adapter_len >= 16:
        return -4
    if adapter_len >= 12:
        return -3
    if adapter_len >= 8:
        return -2
    return 0


def _matches_at(adapter: str, seq: str, pos: int) -> bool:
    cmplen = min(len(seq) - pos, len(adapter))
    allowed = cmplen // ALLOW_ONE_MISMATCH_FOR_EACH
    mismatch = 0
    for i in range(max(0, -pos), cmplen):
        if adapter[i] != seq[i + pos]:
            mismatch += 1
            if mismatch > allowed:
                return False
    return True


def trim_by_sequence(
    read: Read,
    fr: FilterResult | None,
    adapter: str,
    is_r2: bool = False,
    match_req: int = 4,
) -> bool:
    """Cut the read at the first place the adapter matches with few mismatches."""
    rlen = len(read.seq)
    alen = len(adapter)
    if alen < match_req:
        return False

    found = next(
        (pos for pos in range(_search_start(alen), rlen - match_req)
         if _matches_at(adapter, read.seq, pos)),
        None,
    )
    if found is None:
        return False

    if found < 0:
        trimmed = adapter[:alen + found]
        read.seq = ""
        read.quality = ""
    else:
        trimmed = read.seq[found:]
        read.seq = read.seq[:found]
        read.quality = read.quality[:found]
    if fr is not None:
        fr.add_adapter_trimmed(trimmed, is_r2)
    return True


def trim_by_multi_sequences(
    read: Read,
    fr: FilterResult | None,
    adapters: Sequence[str],
    is_r2: bool = False,
    inc_trimmed_counter: bool = True,
) -> bool:
    """Trim by each adapter in turn; the whole removed tail is recorded once."""
    match_req = 4
    if len(adapters) > 16:
        match_req = 5
    if len(adapters) > 256:
        match_req = 6

    original = read.seq
    results = [trim_by_sequence(read, None, adapter, is_r2, match_req) for adapter in adapters]
    trimmed = any(results)
    if trimmed and fr is not None:
        fr.add_adapter_trimmed(original[len(read.seq):], is_r2, inc_trimmed_counter)
    return trimmed