"""Reading FASTQ records from plain or gzip-compressed files."""

from __future__ import annotations

import gzip
import io
import os
import sys
from dataclasses import dataclass
from typing import BinaryIO, Iterator

_COMPLEMENT = str.maketrans("ATCGNatcgn", "TAGCNtagcn")
_PHRED64_TO_33 = {code: code - 31 for code in range(31, 256)}


class FastqFormatError(ValueError):
    """A FASTQ record is malformed."""


@dataclass
class Read:
    """One FASTQ record."""

    name: str
    seq: str
    strand: str
    quality: str

    def __len__(self) -> int:
        return len(self.seq)

    @property
    def length(self) -> int:
        return len(self.seq)

    def reverse_complement(self) -> Read:
        """A new read holding the reverse complement of this one."""
        return Read(
            self.name,
            self.seq.translate(_COMPLEMENT)[::-1],
            self.strand,
            self.quality[::-1],
        )


@dataclass
class ReadPair:
    left: Read
    right: Read


def is_zip_fastq(filename: str) -> bool:
    """Whether the name looks like a gzip-compressed FASTQ/FASTA file."""
    return str(filename).endswith((".fastq.gz", ".fq.gz", ".fasta.gz", ".fa.gz"))


def is_fastq(filename: str) -> bool:
    """Whether the name looks like an uncompressed FASTQ/FASTA file."""
    return str(filename).endswith((".fastq", ".fq", ".fasta", ".fa"))


class FastqReader:
    """Sequential FASTQ reader; names ending in .gz are decompressed."""

    def __init__(self, filename, has_quality: bool = True, phred64: bool = False):
        self.filename = os.fspath(filename)
        self.has_quality = has_quality
        self.phred64 = phred64
        self.zipped = self.filename.endswith(".gz")
        self._owns_raw = self.filename != "/dev/stdin"
        self._raw: BinaryIO = (
            open(self.filename, "rb") if self._owns_raw else sys.stdin.buffer
        )
        stream = gzip.GzipFile(fileobj=self._raw) if self.zipped else self._raw
        self._text = io.TextIOWrapper(stream, encoding="latin-1", newline=None)
        self._closed = False

    def _next_line(self) -> str | None:
        line = self._text.readline()
        if line == "":
            return None
        return line.rstrip("\n")

    def read(self) -> Read | None:
        """The next record, or None at end of input."""
        if self._closed:
            return None
        name = self._next_line()
        while name is not None and not name.startswith("@"):
            name = self._next_line()
        if not name:
            return None
        seq = self._next_line() or ""
        strand = self._next_line() or ""
        if self.has_quality:
            quality = self._next_line() or ""
            if len(quality) != len(seq):
                raise FastqFormatError(
                    "sequence and quality have different length:\n"
                    f"{name}\n{seq}\n{strand}\n{quality}"
                )
        else:
            quality = "K" * len(seq)
        if self.phred64:
            quality = quality.translate(_PHRED64_TO_33)
        return Read(name, seq, strand, quality)

    def __iter__(self) -> Iterator[Read]:
        while (read := self.read()) is not None:
            yield read

    def get_bytes(self) -> tuple[int, int]:
        """(bytes consumed from the underlying file, total file size)."""
        try:
            consumed = self._raw.tell()
        except (OSError, ValueError):
            consumed = 0
        try:
            total = os.path.getsize(self.filename)
        except OSError:
            total = 0
        return consumed, total

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_raw:
            self._text.close()
            self._raw.close()
        else:
            self._text.detach()

    def __enter__(self) -> FastqReader:
        return self

    def __exit__(self, *args) -> None:
        self.close()


class FastqReaderPair:
    """Reads pairs from two files, or from one interleaved file."""

    def __init__(
        self,
        left_name,
        right_name=None,
        has_quality: bool = True,
        phred64: bool = False,
        interleaved: bool = False,
    ):
        self.interleaved = interleaved
        self.left = FastqReader(left_name, has_quality, phred64)
        self.right = None if interleaved else FastqReader(right_name, has_quality, phred64)

    def read(self) -> ReadPair | None:
        """The next pair, or None when either side is exhausted."""
        left = self.left.read()
        source = self.left if self.interleaved else self.right
        right = source.read()
        if left is None or right is None:
            return None
        return ReadPair(left, right)

    def close(self) -> None:
        self.left.close()
        if self.right is not None:
            self.right.close()

    def __enter__(self) -> FastqReaderPair:
        return self

    def __exit__(self, *args) -> None:
        self.close()