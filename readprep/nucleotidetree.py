"""Prefix tree of nucleotide sequences used to extend adapter seeds."""

from __future__ import annotations

from dataclasses import dataclass, field

RATIO_THRESHOLD = 0.95
NUM_THRESHOLD = 50


def _slot(base: str) -> int:
    # (A, T, C, G, N) & 0x07 == (1, 4, 7, 6, 3)
    return ord(base) & 0x07


@dataclass
class NucleotideNode:
    """One base in the tree, with how many added sequences passed through it."""

    base: str = "N"
    count: int = 0
    children: dict[int, NucleotideNode] = field(default_factory=dict)

    def ordered_children(self) -> list[NucleotideNode]:
        """Children in the fixed slot order of their bases."""
        return [self.children[slot] for slot in sorted(self.children)]

    def dfs(self) -> str:
        """Depth-first dump: base and count of each node, one line per leaf."""
        parts = [f"{self.base}{self.count}"]
        kids = self.ordered_children()
        parts.extend(child.dfs() for child in kids)
        if not kids:
            parts.append("\n")
        return "".join(parts)


class NucleotideTree:
    """Counts sequences by shared prefix and finds the dominant path."""

    def __init__(self) -> None:
        self.root = NucleotideNode()

    def add_seq(self, seq: str) -> None:
        """Add a sequence, stopping at the first N."""
        node = self.root
        for base in seq:
            if base == "N":
                break
            slot = _slot(base)
            child = node.children.get(slot)
            if child is None:
                child = NucleotideNode(base=base)
                node.children[slot] = child
            child.count += 1
            node = child

    def get_dominant_path(self) -> tuple[str, bool]:
        """Follow children holding at least 95% of the reads.

        Returns the path and whether the walk ended for lack of reads
        (True) rather than at a node with no dominant child (False).
        """
        path: list[str] = []
        node = self.root
        while True:
            kids = node.ordered_children()
            total = sum(child.count for child in kids)
            if total < NUM_THRESHOLD:
                return "".join(path), True
            dominant = next(
                (child for child in kids if child.count / total >= RATIO_THRESHOLD),
                None,
            )
            if dominant is None:
                return "".join(path), False
            path.append(dominant.base)
            node = dominant