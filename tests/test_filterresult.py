import io

from readprep.filterresult import (
    FilterResult,
    FilterResultType,
    ReportOptions,
    adapter_sort_key,
)


def _json_adapters(fr, counts):
    out = io.StringIO()
    fr.output_adapters_json(out, counts)
    return out.getvalue()


def test_add_filter_result_counts_and_ignores_unknown():
    fr = FilterResult(ReportOptions())
    fr.add_filter_result(FilterResultType.PASS_FILTER)
    fr.add_filter_result(FilterResultType.FAIL_QUALITY, 2)
    fr.add_filter_result(999, 5)
    assert fr.filter_read_stats[FilterResultType.PASS_FILTER] == 1
    assert fr.filter_read_stats[FilterResultType.FAIL_QUALITY] == 2
    assert sum(fr.filter_read_stats.values()) == 3


def test_adapter_sort_key_orders_by_length_then_text():
    assert adapter_sort_key("T") < adapter_sort_key("AC")
    assert adapter_sort_key("A") < adapter_sort_key("T")
    assert adapter_sort_key("AC") < adapter_sort_key("GG")
    assert adapter_sort_key("GG") > adapter_sort_key("A")
    assert adapter_sort_key("AC") == adapter_sort_key("AC")


def test_add_adapter_trimmed_single_and_paired():
    fr = FilterResult(ReportOptions())
    fr.add_adapter_trimmed("ACGT")
    fr.add_adapter_trimmed("ACGT", is_r2=True, inc_trimmed_counter=False)
    fr.add_adapter_trimmed("")
    assert fr.trimmed_adapter_reads == 1
    assert fr.trimmed_adapter_bases == 8
    assert fr.adapter1["ACGT"] == 1
    assert fr.adapter2["ACGT"] == 1

    fr.add_paired_adapter_trimmed("AA", "")
    assert fr.trimmed_adapter_reads == 3
    assert fr.trimmed_adapter_bases == 10
    assert "" not in fr.adapter2


def test_correction_matrix():
    fr = FilterResult(ReportOptions())
    fr.add_correction("A", "T")
    fr.add_correction("A", "T")
    fr.add_correction("C", "G")
    assert fr.correction_num("A", "T") == 2
    assert fr.correction_num("T", "A") == 0
    assert fr.total_corrected_bases() == 3
    fr.inc_corrected_reads(2)
    assert fr.corrected_reads == 2


def test_polyx_totals():
    fr = FilterResult(ReportOptions())
    fr.add_polyx_trimmed(0, 10)
    fr.add_polyx_trimmed(3, 12)
    assert fr.total_polyx_trimmed_reads() == 2
    assert fr.total_polyx_trimmed_bases() == 22


def test_merge_sums_everything():
    a = FilterResult(ReportOptions(), paired=True)
    b = FilterResult(ReportOptions(), paired=True)
    a.add_filter_result(FilterResultType.PASS_FILTER, 3)
    b.add_filter_result(FilterResultType.PASS_FILTER, 4)
    a.add_adapter_trimmed("ACGT")
    b.add_adapter_trimmed("ACGT")
    b.add_adapter_trimmed("TT", is_r2=True)
    a.add_correction("G", "C")
    b.add_correction("G", "C")
    a.add_merged_pairs(5)
    b.add_polyx_trimmed(1, 11)
    merged = FilterResult.merge([a, b])
    assert merged.paired is True
    assert merged.filter_read_stats[FilterResultType.PASS_FILTER] == 7
    assert merged.adapter1["ACGT"] == 2
    assert merged.adapter2["TT"] == 1
    assert merged.trimmed_adapter_reads == 3
    assert merged.correction_num("G", "C") == 2
    assert merged.merged_pairs == 5
    assert merged.trimmed_polyx_bases[1] == 11


def test_merge_empty_returns_none():
    assert FilterResult.merge([]) is None


def test_output_adapters_json_groups_rare_as_others():
    fr = FilterResult(ReportOptions())
    text = _json_adapters(fr, {"AC": 200, "A": 100, "G": 1})
    assert text == '"A":100, "AC":200, "others":1'


def test_output_adapters_json_empty_writes_nothing():
    fr = FilterResult(ReportOptions())
    assert _json_adapters(fr, {}) == ""


def test_report_json_respects_options():
    fr = FilterResult(ReportOptions(correction_enabled=True, complexity_filter_enabled=True))
    fr.add_filter_result(FilterResultType.PASS_FILTER, 9)
    out = io.StringIO()
    fr.report_json(out, "\t")
    text = out.getvalue()
    assert text.startswith("{\n")
    assert '\t\t"passed_filter_reads": 9,\n' in text
    assert '"corrected_reads"' in text
    assert '"low_complexity_reads"' in text
    assert text.endswith('\t\t"too_long_reads": 0\n\t},\n')

    plain = FilterResult(ReportOptions())
    out = io.StringIO()
    plain.report_json(out, "")
    assert '"corrected_reads"' not in out.getvalue()


def test_report_adapter_json_paired_has_read2():
    opts = ReportOptions(paired=True, adapter1="AGATC", adapter2="AGATT")
    fr = FilterResult(opts, paired=True)
    fr.add_paired_adapter_trimmed("AGATC", "AGATT")
    out = io.StringIO()
    fr.report_adapter_json(out, "\t")
    text = out.getvalue()
    assert '"read1_adapter_sequence": "AGATC"' in text
    assert '"read2_adapter_sequence": "AGATT"' in text
    assert '"read1_adapter_counts": {"AGATC":1},' in text
    assert '"read2_adapter_counts": {"AGATT":1}' in text


def test_report_polyx_json():
    fr = FilterResult(ReportOptions(polyx_enabled=True))
    fr.add_polyx_trimmed(2, 15)
    out = io.StringIO()
    fr.report_polyx_trim_json(out, "")
    text = out.getvalue()
    assert '"total_polyx_trimmed_reads": 1,' in text
    assert '"polyx_trimmed_bases":{"A": 0, "T": 0, "C": 15, "G": 0}' in text
    assert text.endswith("\n},\n")


def test_summary_lines_follow_options():
    fr = FilterResult(ReportOptions(adapter_enabled=False, max_length=100))
    fr.add_filter_result(FilterResultType.FAIL_TOO_LONG, 2)
    lines = fr.summary_lines()
    assert "reads failed due to too long: 2" in lines
    assert not any("adapter" in line for line in lines)


def test_report_html_rows():
    fr = FilterResult(ReportOptions())
    fr.add_filter_result(FilterResultType.PASS_FILTER, 50)
    out = io.StringIO()
    fr.report_html(out, 100, 1000)
    text = out.getvalue()
    assert text.startswith("<table class='summary_table'>\n")
    assert "reads passed filters:</td><td class='col2'>50 (50.000000%)" in text
    assert text.endswith("</table>\n")


def test_output_adapters_html_tags():
    fr = FilterResult(ReportOptions())
    out = io.StringIO()
    fr.output_adapters_html(out, {"A": 1, "C": 1000}, 10)
    text = out.getvalue()
    assert "probably it's trimmed before" not in text
    assert "<td class='adapter_col'>C</td><td class='col2'>1000</td>" in text
    assert "other adapter sequences</td><td class='col2'>1<" in text

    out = io.StringIO()
    fr.output_adapters_html(out, {}, 1000)
    assert "probably it's trimmed before" in out.getvalue()
    assert "<table" not in out.getvalue()


def test_report_adapter_html_paired_sections():
    fr = FilterResult(ReportOptions(paired=True), paired=True)
    out = io.StringIO()
    fr.report_adapter_html(out, 100)
    text = out.getvalue()
    assert "id='read1_adapters'" in text
    assert "id='read2_adapters'" in text