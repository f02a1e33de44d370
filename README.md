# readprep

A library of building blocks for preprocessing sequencing reads in FASTQ
format. It has no dependencies outside the standard library.

## Modules

- `readprep.fastqreader`: `FastqReader` reads plain or gzip-compressed
  (names ending in `.gz`) FASTQ files record by record, as an iterator and a
  context manager. `read()` returns a `Read` (`name`, `seq`, `strand`,
  `quality`) or `None` at the end, and raises `FastqFormatError` when a
  sequence and its quality differ in length. `phred64=True` converts quality
  strings to phred33; `has_quality=False` reads records without a quality
  line and fills quality with `K`. `get_bytes()` gives bytes consumed and the
  file size. `FastqReaderPair` reads `ReadPair`s from two files or from one
  interleaved file. `is_fastq` and `is_zip_fastq` test file names.
- `readprep.fastareader`: `FastaReader` loads contigs from a FASTA file.
  `read_next()` returns `(id, sequence)`; `read_all()` fills and returns the
  `contigs` dict. Non-letter characters are dropped from sequence lines and,
  by default, letters are upper-cased.
- `readprep.filter`: `Filter` with `FilterOptions` (quality, length,
  complexity, quality-cut and index settings). `pass_filter(read)` returns a
  `FilterResultType`; `trim_and_cut(read, front, tail)` trims fixed bases and
  cuts by sliding-window mean quality (front, tail or right mode) and returns
  `(read or None, bases removed from the front)`; `filter_by_index` checks
  index sequences against blacklists with `match`.
- `readprep.adaptertrimmer`: `trim_by_sequence` and `trim_by_multi_sequences`
  cut a read at an adapter match that allows one mismatch per 8 bases;
  `trim_by_overlap_analysis` cuts both reads of a pair given an
  `OverlapResult`.
- `readprep.basecorrector`: `correct_by_overlap_analysis` fixes mismatched
  bases in the overlap of a pair where one read has quality ≥ Q30 and the
  other ≤ Q14, and returns the number of corrected bases.
- `readprep.duplicate`: `Duplicate` records reads (`stat_read`) or pairs
  (`stat_pair`) and `stat_all(hist_size)` returns the duplication rate, the
  histogram of duplication levels and the mean GC ratio per level.
- `readprep.evaluator`: `Evaluator` samples input files to find read length
  (`evaluate_seq_len`), overrepresented sequences (`evaluate_over_rep_seqs`),
  the estimated number of reads (`evaluate_read_num`), whether read names
  look like a two-colour instrument (`is_two_color_system`) and the adapter
  sequence (`eval_adapter_and_read_num`, which needs at least 10,000 reads).
  Detected adapters are matched against the `known_adapters` mapping
  (sequence to description) passed in; none is built in.
- `readprep.nucleotidetree`: `NucleotideTree`, the prefix tree used to extend
  adapter seeds; `get_dominant_path()` returns `(path, reached_leaf)`.
- `readprep.filterresult`: `FilterResult` counts filter outcomes, trimmed
  adapters, polyX tails and corrections; results from several workers can be
  combined with `FilterResult.merge`. It writes summary lines and JSON and
  HTML report fragments, controlled by `ReportOptions`.
- `readprep.htmlreporter`: helpers for HTML reports: `format_number`,
  `get_percents`, `output_row`, `write_header`, `write_footer`.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Example

```python
from readprep.fastqreader import FastqReader
from readprep.filter import Filter, FilterOptions
from readprep.filterresult import FilterResult, ReportOptions
from readprep.adaptertrimmer import trim_by_sequence

read_filter = Filter(FilterOptions())
result = FilterResult(ReportOptions())

with FastqReader("sample.fq.gz") as reader:
    for read in reader:
        trim_by_sequence(read, result, "AGATCGGAAGAGC")
        result.add_filter_result(read_filter.pass_filter(read))

print("\n".join(result.summary_lines()))
```

## What it does not do

- There is no command-line program; everything is used from Python.
- There is no processing pipeline that reads, filters and writes output
  files; writing FASTQ output, splitting output, merging pairs and UMI
  handling are not provided.
- Paired-end overlap detection is not included: the trimming and correction
  functions take an `OverlapResult` that the caller computes.
- No complete JSON or HTML report is written; `FilterResult` and
  `readprep.htmlreporter` produce the fragments and page head and foot only.