"""Render Cluster listings as aligned text columns."""

from collections.abc import Iterable, Iterator, Mapping
import sys
from typing import Any, TextIO

PADDING = 4


def format_table(headers: list[str], rows: list[list[str]]) -> Iterator[str]:
    """Yield the headers and rows with every column padded to its widest cell."""
    if not headers:
        return
    table = [headers, *rows]
    widths = [max(map(len, column)) + PADDING for column in zip(*table)]
    for row in table:
        yield "".join(cell.ljust(width) for cell, width in zip(row, widths)).rstrip()


class ClusterTable:
    """Prints one line per Cluster with the selected fields as columns."""

    def __init__(self, columns: list[str]) -> None:
        self._columns = columns

    def lines(self, clusters: Iterable[Mapping[str, Any]]) -> Iterator[str]:
        rows = [[str(item[column]) for column in self._columns] for item in clusters]
        if rows:
            yield from format_table([column.upper() for column in self._columns], rows)

    def print(
        self, clusters: Iterable[Mapping[str, Any]], file: TextIO = sys.stdout
    ) -> None:
        for line in self.lines(clusters):
            print(line, file=file)
