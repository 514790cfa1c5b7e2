"""Markdown-aware text chunking.

The document is split at ATX headings and blank lines, the resulting
blocks are merged greedily up to ``chunk_size`` characters, and each
chunk after the first is prefixed with the tail of its predecessor.
"""

from __future__ import annotations

import logging
import re

from story_indexer.models import Chunk

logger = logging.getLogger(__name__)

# Break before a heading line, before end-of-text, or across a blank line.
_BLOCK_BOUNDARY_RE = re.compile(r"\n(?=#{1,6}\s|\Z)|\n\n+")


def split_blocks(text: str) -> list[str]:
    """Split *text* into trimmed, non-empty heading / paragraph blocks."""
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    blocks = (block.strip() for block in _BLOCK_BOUNDARY_RE.split(normalized))
    return [block for block in blocks if block]


def merge_blocks(blocks: list[str], chunk_size: int) -> list[str]:
    """Greedily join consecutive *blocks* with ``\\n`` while they fit in *chunk_size*.

    A single block longer than *chunk_size* is kept whole as its own chunk.
    """
    merged: list[str] = []
    current = ""
    for block in blocks:
        if not current:
            current = block
        elif len(current) + 1 + len(block) <= chunk_size:
            current = f"{current}\n{block}"
        else:
            merged.append(current)
            current = block
    if current:
        merged.append(current)
    return merged


def apply_overlap(chunks: list[str], overlap: int, max_length: int) -> list[str]:
    """Prefix every chunk after the first with the last *overlap* chars of its predecessor.

    The tail is taken from the *un-overlapped* predecessor, and each
    rewritten chunk is capped at *max_length* characters.  When the cap
    cuts into the chunk's own text the dropped characters are lost, and a
    warning is logged.
    """
    if overlap <= 0 or len(chunks) < 2:
        return list(chunks)

    result = [chunks[0]]
    for index, (prev, cur) in enumerate(zip(chunks, chunks[1:]), 1):
        tail = prev[-overlap:]
        joiner = "\n" if tail and cur else ""
        merged = f"{tail}{joiner}{cur}"
        dropped = min(len(cur), len(merged) - max_length)
        if dropped > 0:
            logger.warning(
                "Chunk %d exceeds %d chars after overlap; dropping last %d chars of its text",
                index,
                max_length,
                dropped,
            )
        result.append(merged[:max_length])
    return result


def chunk_markdown(text: str, chunk_size: int = 1200, chunk_overlap: int = 200) -> list[Chunk]:
    """Split *text* into ordered, overlapping chunks sized for embedding.

    Parameters
    ----------
    text:
        Raw document text (Markdown).
    chunk_size:
        Target maximum number of characters per merged chunk.
    chunk_overlap:
        Number of trailing characters of each chunk repeated at the start
        of the next one.  ``0`` disables overlap.

    Returns
    -------
    list[Chunk]
        Chunks numbered ``0..N-1``.  Empty or whitespace-only input
        yields an empty list.
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")
    if chunk_overlap < 0:
        raise ValueError(f"chunk_overlap must be non-negative, got {chunk_overlap}")

    merged = merge_blocks(split_blocks(text), chunk_size)
    texts = apply_overlap(merged, chunk_overlap, max_length=chunk_size * 2)
    return [Chunk(sequence_index=i, text=t) for i, t in enumerate(texts)]
