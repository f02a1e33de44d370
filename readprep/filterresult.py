"""Counters for filtering, trimming and correction outcomes, and their reports."""

from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, Mapping, TextIO

from readprep.htmlreporter import format_number, output_row

ATCG_BASES = "ATCG"
REPORT_THRESHOLD = 0.01


class FilterResultType(IntEnum):
    """Why a read was kept or dropped."""

    PASS_FILTER = 0
    FAIL_QUALITY = 1
    FAIL_N_BASE = 2
    FAIL_LENGTH = 3
    FAIL_TOO_LONG = 4
    FAIL_COMPLEXITY = 5


@dataclass
class ReportOptions:
    """The settings that decide which parts of the filtering report appear."""

    paired: bool = False
    length_filter_enabled: bool = True
    max_length: int = 0
    complexity_filter_enabled: bool = False
    adapter_enabled: bool = True
    polyx_enabled: bool = False
    correction_enabled: bool = False
    adapter1: str = ""
    adapter2: str = ""


def adapter_sort_key(seq: str) -> tuple[int, str]:
    """Order adapters by length first, then lexically."""
    return len(seq), seq


def _divide(numerator: float, denominator: float) -> float:
    # Floating-point semantics for a zero denominator instead of an exception.
    if denominator == 0:
        if numerator == 0:
            return math.nan
        return math.copysign(math.inf, numerator)
    return numerator / denominator


def _fixed(value: float) -> str:
    return f"{value:f}"


def _correction_index(from_base: str, to_base: str) -> int:
    return (ord(from_base) & 0x07) * 8 + (ord(to_base) & 0x07)


class FilterResult:
    """Accumulates per-read outcomes of filtering, trimming and correction."""

    def __init__(self, options: ReportOptions | None = None, paired: bool = False):
        self.options = options if options is not None else ReportOptions(paired=paired)
        self.paired = paired
        self.filter_read_stats: dict[FilterResultType, int] = {t: 0 for t in FilterResultType}
        self.trimmed_adapter_reads = 0
        self.trimmed_adapter_bases = 0
        self.trimmed_polyx_reads = [0, 0, 0, 0]
        self.trimmed_polyx_bases = [0, 0, 0, 0]
        self.adapter1: Counter[str] = Counter()
        self.adapter2: Counter[str] = Counter()
        self.correction_matrix = [0] * 64
        self.corrected_reads = 0
        self.merged_pairs = 0

    def add_filter_result(self, result, read_num: int = 1) -> None:
        """Count read_num reads under result; unknown results are ignored."""
        try:
            kind = FilterResultType(result)
        except ValueError:
            return
        self.filter_read_stats[kind] += read_num

    def add_merged_pairs(self, pairs: int) -> None:
        self.merged_pairs += pairs

    @staticmethod
    def merge(results: Iterable[FilterResult]) -> FilterResult | None:
        """Sum several results into a new one; None for an empty input."""
        results = list(results)
        if not results:
            return None
        merged = FilterResult(results[0].options, results[0].paired)
        for item in results:
            for kind, count in item.filter_read_stats.items():
                merged.filter_read_stats[kind] += count
            merged.trimmed_adapter_reads += item.trimmed_adapter_reads
            merged.trimmed_adapter_bases += item.trimmed_adapter_bases
            merged.merged_pairs += item.merged_pairs
            for b in range(4):
                merged.trimmed_polyx_reads[b] += item.trimmed_polyx_reads[b]
                merged.trimmed_polyx_bases[b] += item.trimmed_polyx_bases[b]
            merged.adapter1.update(item.adapter1)
            merged.adapter2.update(item.adapter2)
            merged.correction_matrix = [
                a + b for a, b in zip(merged.correction_matrix, item.correction_matrix)
            ]
            merged.corrected_reads += item.corrected_reads
        return merged

    def add_adapter_trimmed(
        self, adapter: str, is_r2: bool = False, inc_trimmed_counter: bool = True
    ) -> None:
        """Record an adapter cut from a single read; empty adapters are ignored."""
        if not adapter:
            return
        if inc_trimmed_counter:
            self.trimmed_adapter_reads += 1
        self.trimmed_adapter_bases += len(adapter)
        (self.adapter2 if is_r2 else self.adapter1)[adapter] += 1

    def add_paired_adapter_trimmed(self, adapter1: str, adapter2: str) -> None:
        """Record adapters cut from both reads of a pair."""
        self.trimmed_adapter_reads += 2
        self.trimmed_adapter_bases += len(adapter1) + len(adapter2)
        if adapter1:
            self.adapter1[adapter1] += 1
        if adapter2:
            self.adapter2[adapter2] += 1

    def add_polyx_trimmed(self, base: int, length: int) -> None:
        """Record a polyX tail of the base with index base in ATCG order."""
        self.trimmed_polyx_reads[base] += 1
        self.trimmed_polyx_bases[base] += length

    def total_polyx_trimmed_reads(self) -> int:
        return sum(self.trimmed_polyx_reads)

    def total_polyx_trimmed_bases(self) -> int:
        return sum(self.trimmed_polyx_bases)

    def add_correction(self, from_base: str, to_base: str) -> None:
        self.correction_matrix[_correction_index(from_base, to_base)] += 1

    def correction_num(self, from_base: str, to_base: str) -> int:
        return self.correction_matrix[_correction_index(from_base, to_base)]

    def total_corrected_bases(self) -> int:
        return sum(self.correction_matrix)

    def inc_corrected_reads(self, count: int) -> None:
        self.corrected_reads += count

    def summary_lines(self) -> list[str]:
        """Human-readable summary, one line per counter that applies."""
        opt = self.options
        stats = self.filter_read_stats
        lines = [
            f"reads passed filter: {stats[FilterResultType.PASS_FILTER]}",
            f"reads failed due to low quality: {stats[FilterResultType.FAIL_QUALITY]}",
            f"reads failed due to too many N: {stats[FilterResultType.FAIL_N_BASE]}",
        ]
        if opt.length_filter_enabled:
            lines.append(f"reads failed due to too short: {stats[FilterResultType.FAIL_LENGTH]}")
            if opt.max_length > 0:
                lines.append(
                    f"reads failed due to too long: {stats[FilterResultType.FAIL_TOO_LONG]}"
                )
        if opt.complexity_filter_enabled:
            lines.append(
                f"reads failed due to low complexity: {stats[FilterResultType.FAIL_COMPLEXITY]}"
            )
        if opt.adapter_enabled:
            lines.append(f"reads with adapter trimmed: {self.trimmed_adapter_reads}")
            lines.append(f"bases trimmed due to adapters: {self.trimmed_adapter_bases}")
        if opt.polyx_enabled:
            lines.append(f"reads with polyX in 3' end: {self.total_polyx_trimmed_reads()}")
            lines.append(f"bases trimmed in polyX tail: {self.total_polyx_trimmed_bases()}")
        if opt.correction_enabled:
            lines.append(f"reads corrected by overlap analysis: {self.corrected_reads}")
            lines.append(f"bases corrected by overlap analysis: {self.total_corrected_bases()}")
        return lines

    def report_json(self, out: TextIO, padding: str) -> None:
        """Write the filtering_result object of the JSON report."""
        stats = self.filter_read_stats
        p = padding + "\t"
        out.write("{\n")
        out.write(f'{p}"passed_filter_reads": {stats[FilterResultType.PASS_FILTER]},\n')
        if self.options.correction_enabled:
            out.write(f'{p}"corrected_reads": {self.corrected_reads},\n')
            out.write(f'{p}"corrected_bases": {self.total_corrected_bases()},\n')
        out.write(f'{p}"low_quality_reads": {stats[FilterResultType.FAIL_QUALITY]},\n')
        out.write(f'{p}"too_many_N_reads": {stats[FilterResultType.FAIL_N_BASE]},\n')
        if self.options.complexity_filter_enabled:
            out.write(f'{p}"low_complexity_reads": {stats[FilterResultType.FAIL_COMPLEXITY]},\n')
        out.write(f'{p}"too_short_reads": {stats[FilterResultType.FAIL_LENGTH]},\n')
        out.write(f'{p}"too_long_reads": {stats[FilterResultType.FAIL_TOO_LONG]}\n')
        out.write(f"{padding}}},\n")

    def output_adapters_json(self, out: TextIO, adapter_counts: Mapping[str, int]) -> None:
        """Write adapter counts; those under 1% are summed as "others"."""
        total = sum(adapter_counts.values())
        if total == 0:
            return
        items = []
        reported = 0
        for seq in sorted(adapter_counts, key=adapter_sort_key):
            count = adapter_counts[seq]
            if count / total < REPORT_THRESHOLD:
                continue
            items.append(f'"{seq}":{count}')
            reported += count
        unreported = total - reported
        if unreported > 0:
            items.append(f'"others":{unreported}')
        out.write(", ".join(items))

    def report_adapter_json(self, out: TextIO, padding: str) -> None:
        """Write the adapter_cutting object of the JSON report."""
        paired = self.options.paired
        p = padding + "\t"
        out.write("{\n")
        out.write(f'{p}"adapter_trimmed_reads": {self.trimmed_adapter_reads},\n')
        out.write(f'{p}"adapter_trimmed_bases": {self.trimmed_adapter_bases},\n')
        out.write(f'{p}"read1_adapter_sequence": "{self.options.adapter1}",\n')
        if paired:
            out.write(f'{p}"read2_adapter_sequence": "{self.options.adapter2}",\n')
        out.write(f'{p}"read1_adapter_counts": {{')
        self.output_adapters_json(out, self.adapter1)
        out.write("}")
        if paired:
            out.write(",")
        out.write("\n")
        if paired:
            out.write(f'{p}"read2_adapter_counts": {{')
            self.output_adapters_json(out, self.adapter2)
            out.write("}\n")
        out.write(f"{padding}}},\n")

    @staticmethod
    def _write_base_counts_json(
        out: TextIO, pad: str, key: str, total: int, counts: list[int]
    ) -> None:
        out.write(f'{pad}\t"total_{key}": {total},\n')
        out.write(f'{pad}\t"{key}":{{')
        out.write(", ".join(f'"{base}": {n}' for base, n in zip(ATCG_BASES, counts)))
        out.write("}")

    def report_polyx_trim_json(self, out: TextIO, padding: str) -> None:
        """Write the polyx_trimming object of the JSON report."""
        out.write(f"{padding}{{\n")
        self._write_base_counts_json(
            out, padding, "polyx_trimmed_reads",
            self.total_polyx_trimmed_reads(), self.trimmed_polyx_reads,
        )
        out.write(",\n")
        self._write_base_counts_json(
            out, padding, "polyx_trimmed_bases",
            self.total_polyx_trimmed_bases(), self.trimmed_polyx_bases,
        )
        out.write(f"\n{padding}}},\n")

    def report_html(self, out: TextIO, total_reads: int, total_bases: int) -> None:
        """Write the filtering-result table of the HTML report."""
        opt = self.options
        stats = self.filter_read_stats

        def with_percent(count: int, total: int) -> str:
            return f"{format_number(count)} ({_fixed(_divide(count * 100.0, total))}%)"

        out.write("<table class='summary_table'>\n")
        output_row(out, "reads passed filters:",
                   with_percent(stats[FilterResultType.PASS_FILTER], total_reads))
        if opt.correction_enabled:
            output_row(out, "reads corrected:", with_percent(self.corrected_reads, total_reads))
            output_row(out, "bases corrected:",
                       with_percent(self.total_corrected_bases(), total_bases))
        output_row(out, "reads with low quality:",
                   with_percent(stats[FilterResultType.FAIL_QUALITY], total_reads))
        output_row(out, "reads with too many N:",
                   with_percent(stats[FilterResultType.FAIL_N_BASE], total_reads))
        if opt.length_filter_enabled:
            output_row(out, "reads too short:",
                       with_percent(stats[FilterResultType.FAIL_LENGTH], total_reads))
            if opt.max_length > 0:
                output_row(out, "reads too long:",
                           with_percent(stats[FilterResultType.FAIL_TOO_LONG], total_reads))
        if opt.complexity_filter_enabled:
            output_row(out, "reads with low complexity:",
                       with_percent(stats[FilterResultType.FAIL_COMPLEXITY], total_reads))
        out.write("</table>\n")

    def output_adapters_html(
        self, out: TextIO, adapter_counts: Mapping[str, int], total_bases: int
    ) -> None:
        """Write the adapter table; small adapter fractions get a tip line."""
        total = sum(adapter_counts.values())
        adapter_bases = sum(len(seq) * n for seq, n in adapter_counts.items())
        frac = _divide(float(adapter_bases), float(total_bases))
        if self.options.paired:
            frac *= 2.0
        if frac < 0.01:
            out.write(
                "<div class='sub_section_tips'>The input has little adapter percentage (~"
                f"{_fixed(frac * 100.0)}%), probably it's trimmed before.</div>\n"
            )
        if total == 0:
            return
        header_style = "font-size:14px;color:#ffffff;background:#556699"
        out.write("<table class='summary_table'>\n")
        out.write(
            f"<tr><td class='adapter_col' style='{header_style}'>Sequence</td>"
            f"<td class='col2' style='{header_style}'>Occurrences</td></tr>\n"
        )
        reported = 0
        for seq in sorted(adapter_counts, key=adapter_sort_key):
            count = adapter_counts[seq]
            if count / total < REPORT_THRESHOLD:
                continue
            out.write(f"<tr><td class='adapter_col'>{seq}</td><td class='col2'>{count}</td></tr>\n")
            reported += count
        unreported = total - reported
        if unreported > 0:
            tag = "all adapter sequences" if reported == 0 else "other adapter sequences"
            out.write(
                f"<tr><td class='adapter_col'>{tag}</td><td class='col2'>{unreported}</td></tr>\n"
            )
        out.write("</table>\n")

    def report_adapter_html(self, out: TextIO, total_bases: int) -> None:
        """Write the adapter section(s) of the HTML report."""
        out.write("<div class='subsection_title' onclick=showOrHide('read1_adapters')>"
                  "Adapter or bad ligation of read1</div>\n")
        out.write("<div id='read1_adapters'>\n")
        self.output_adapters_html(out, self.adapter1, total_bases)
        out.write("</div>\n")
        if self.options.paired:
            out.write("<div class='subsection_title' onclick=showOrHide('read2_adapters')>"
                      "Adapter or bad ligation of read2</div>\n")
            out.write("<div id='read2_adapters'>\n")
            self.output_adapters_html(out, self.adapter2, total_bases)
            out.write("</div>\n")