"""Splitting of staged diffs into per-file chunks."""

import io
import re
from typing import List

FILE_BOUNDARY = re.compile(r"^diff --git")


def split_diff(diff: str) -> List[str]:
    """Split a unified diff into one chunk per file section.

    Each ``diff --git`` header starts a new chunk. Line terminators are kept,
    so ``"".join(split_diff(diff)) == diff`` always holds. A diff without any
    header comes back as a single chunk, an empty diff as no chunks at all.
    """
    chunks: List[str] = []
    current: List[str] = []

    # newline="\n" splits on "\n" only and leaves "\r" untouched
    for line in io.StringIO(diff, newline="\n"):
        if FILE_BOUNDARY.match(line) and current:
            chunks.append("".join(current))
            current = []
        current.append(line)

    if current:
        chunks.append("".join(current))

    return chunks
