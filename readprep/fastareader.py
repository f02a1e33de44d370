"""Reading contigs from FASTA files."""

from __future__ import annotations

import os


class FastaReader:
    """Sequential FASTA reader collecting contigs by their header line."""

    def __init__(self, path, force_upper_case: bool = True):
        self.path = os.fspath(path)
        self.force_upper_case = force_upper_case
        if os.path.isdir(self.path):
            raise ValueError(
                f"There is a problem with the provided fasta file: "
                f"'{self.path}' is a directory NOT a file"
            )
        try:
            self._file = open(self.path, encoding="latin-1")
        except OSError as exc:
            raise ValueError(
                f"There is a problem with the provided fasta file: could NOT read {self.path}"
            ) from exc
        self.current_id = ""
        self.current_description = ""
        self.current_sequence = ""
        self.contigs: dict[str, str] = {}
        self._pending: str | None = None
        for line in iter(self._file.readline, ""):
            if line.startswith(">"):
                self._pending = line[1:].rstrip("\n")
                break

    def _clean(self, line: str) -> str:
        kept = "".join(ch for ch in line if ch.isalpha())
        return kept.upper() if self.force_upper_case else kept

    def has_next(self) -> bool:
        return self._pending is not None

    def read_next(self) -> tuple[str, str]:
        """Read the next contig; returns (id, sequence)."""
        header = self._pending
        self._pending = None
        parts: list[str] = []
        if header is not None:
            for line in iter(self._file.readline, ""):
                if line.startswith(">"):
                    self._pending = line[1:].rstrip("\n")
                    break
                parts.append(self._clean(line))
        self.current_id = header or ""
        self.current_description = ""
        self.current_sequence = "".join(parts)
        return self.current_id, self.current_sequence

    def read_all(self) -> dict[str, str]:
        """Read every remaining contig into ``contigs`` and return it."""
        while self.has_next():
            contig_id, seq = self.read_next()
            self.contigs[contig_id] = seq
        return self.contigs

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> FastaReader:
        return self

    def __exit__(self, *args) -> None:
        self.close()