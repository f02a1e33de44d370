"""Base correction in the overlapping region of paired-end reads."""

from __future__ import annotations

import warnings

from readprep.adaptertrimmer import OverlapResult
from readprep.fastqreader import Read
from readprep.filterresult import FilterResult

_COMPLEMENTS = {
    "A": "T", "T": "A", "C": "G", "G": "C",
    "a": "t", "t": "a", "c": "g", "g": "c",
}
GOOD_QUAL = chr(30 + 33)
BAD_QUAL = chr(14 + 33)

_warned = False


def complement(base: str) -> str:
    """The complementary base; anything other than ACGT becomes N."""
    return _COMPLEMENTS.get(base, "N")


def correct_by_overlap_analysis(
    r1: Read, r2: Read, fr: FilterResult | None, ov: OverlapResult
) -> int:
    """Fix mismatches in the overlap where one read is confident and the other is not.

    Returns the number of bases corrected.
    """
    global _warned
    if ov.diff == 0 or not ov.overlapped:
        return 0

    start1 = max(0, ov.offset)
    start2 = len(r2.seq) - max(0, -ov.offset) - 1
    seq1, qual1 = list(r1.seq), list(r1.quality)
    seq2, qual2 = list(r2.seq), list(r2.quality)

    corrected = 0
    uncorrected = 0
    r1_corrected = False
    r2_corrected = False
    for i in range(ov.overlap_len):
        p1 = start1 + i
        p2 = start2 - i
        b1, b2 = seq1[p1], seq2[p2]
        if b1 == complement(b2):
            continue
        if qual1[p1] >= GOOD_QUAL and qual2[p2] <= BAD_QUAL:
            fixed = complement(b1)
            seq2[p2] = fixed
            qual2[p2] = qual1[p1]
            corrected += 1
            r2_corrected = True
            if fr is not None:
                fr.add_correction(b2, fixed)
        elif qual2[p2] >= GOOD_QUAL and qual1[p1] <= BAD_QUAL:
            fixed = complement(b2)
            seq1[p1] = fixed
            qual1[p1] = qual2[p2]
            corrected += 1
            r1_corrected = True
            if fr is not None:
                fr.add_correction(b1, fixed)
        else:
            uncorrected += 1

    r1.seq, r1.quality = "".join(seq1), "".join(qual1)
    r2.seq, r2.quality = "".join(seq2), "".join(qual2)

    if uncorrected + corrected != ov.diff and not _warned:
        warnings.warn("overlap mismatch count disagrees with the overlap analysis")
        _warned = True

    if corrected > 0 and fr is not None:
        fr.inc_corrected_reads(2 if r1_corrected and r2_corrected else 1)

    return corrected