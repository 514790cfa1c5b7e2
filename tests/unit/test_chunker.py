"""Unit tests for the chunker module."""

import logging

import pytest

from story_indexer.ingestion.chunker import (
    apply_overlap,
    chunk_markdown,
    merge_blocks,
    split_blocks,
)


def _texts(chunks) -> list[str]:
    return [c.text for c in chunks]


class TestSplitBlocks:
    def test_splits_on_blank_lines(self) -> None:
        assert split_blocks("alpha\n\nbeta\n\n\n\ngamma") == ["alpha", "beta", "gamma"]

    def test_splits_before_headings(self) -> None:
        text = "intro paragraph\n# Heading\nbody\n###### Deep\nmore"
        assert split_blocks(text) == ["intro paragraph", "# Heading\nbody", "###### Deep\nmore"]

    def test_seven_hashes_is_not_a_heading(self) -> None:
        assert split_blocks("line\n####### not a heading") == ["line\n####### not a heading"]

    def test_hash_without_space_is_not_a_heading(self) -> None:
        assert split_blocks("line\n#hashtag") == ["line\n#hashtag"]

    def test_normalizes_crlf(self) -> None:
        assert split_blocks("one\r\n\r\ntwo\r\n# Three") == ["one", "two", "# Three"]

    def test_discards_whitespace_blocks(self) -> None:
        assert split_blocks("  \n\n   \n\nreal\n\n \t ") == ["real"]


class TestMergeBlocks:
    def test_merges_while_within_size(self) -> None:
        assert merge_blocks(["aaaa", "bbbb", "cccc"], chunk_size=9) == ["aaaa\nbbbb", "cccc"]

    def test_boundary_is_inclusive(self) -> None:
        assert merge_blocks(["aaaa", "bbbb"], chunk_size=9) == ["aaaa\nbbbb"]
        assert merge_blocks(["aaaa", "bbbb"], chunk_size=8) == ["aaaa", "bbbb"]

    def test_oversized_block_kept_whole(self) -> None:
        assert merge_blocks(["x" * 50], chunk_size=10) == ["x" * 50]


class TestApplyOverlap:
    def test_no_overlap_returns_copy(self) -> None:
        chunks = ["a", "b"]
        assert apply_overlap(chunks, 0, max_length=10) == chunks

    def test_single_chunk_untouched(self) -> None:
        assert apply_overlap(["only"], 3, max_length=10) == ["only"]

    def test_prefixes_tail_of_previous(self) -> None:
        assert apply_overlap(["aaaa\nbbbb", "cccc"], 3, max_length=18) == ["aaaa\nbbbb", "bbb\ncccc"]


class TestChunkMarkdown:
    def test_empty_input_yields_no_chunks(self) -> None:
        assert chunk_markdown("") == []
        assert chunk_markdown("   \n\n\t \r\n") == []

    def test_short_document_is_one_chunk(self) -> None:
        chunks = chunk_markdown("# Title\nIntro line.\n\n## Part\nBody text.", chunk_size=200)
        assert _texts(chunks) == ["# Title\nIntro line.\n## Part\nBody text."]
        assert chunks[0].sequence_index == 0

    def test_sequence_indices_are_contiguous(self) -> None:
        text = "\n\n".join(f"paragraph {i} " + "w" * 30 for i in range(10))
        chunks = chunk_markdown(text, chunk_size=60, chunk_overlap=10)
        assert [c.sequence_index for c in chunks] == list(range(len(chunks)))
        assert len(chunks) > 1

    def test_is_deterministic(self) -> None:
        text = "\n\n".join(f"## Section {i}\n" + "lorem ipsum " * 8 for i in range(6))
        assert chunk_markdown(text, 120, 30) == chunk_markdown(text, 120, 30)

    def test_overlap_tail_comes_from_unoverlapped_predecessor(self) -> None:
        text = "\n\n".join(["a" * 10, "b" * 10, "c" * 10])
        chunks = _texts(chunk_markdown(text, chunk_size=10, chunk_overlap=12))
        assert chunks[0] == "a" * 10
        assert chunks[1] == ("a" * 10 + "\n" + "b" * 10)[:20]
        # tail comes from the un-overlapped "b" chunk, not from chunk[1]
        assert chunks[2].startswith("b" * 10)
        assert "a" not in chunks[2]

    def test_overlap_prefix_matches_previous_tail(self) -> None:
        text = "\n\n".join(f"Block number {i}: " + "story " * 12 for i in range(8))
        overlap = 25
        plain = _texts(chunk_markdown(text, chunk_size=150, chunk_overlap=0))
        overlapped = _texts(chunk_markdown(text, chunk_size=150, chunk_overlap=overlap))
        assert len(plain) == len(overlapped) > 1
        assert overlapped[0] == plain[0]
        for prev, cur in zip(plain, overlapped[1:]):
            assert cur.startswith(prev[-overlap:])

    def test_safety_cap_after_overlap(self) -> None:
        text = "\n\n".join(["a" * 10, "b" * 10])
        chunks = _texts(chunk_markdown(text, chunk_size=10, chunk_overlap=50))
        assert chunks[1] == "a" * 10 + "\n" + "b" * 9
        assert all(len(c) <= 20 for c in chunks)

    def test_chunks_within_twice_target_size(self) -> None:
        text = "\n\n".join(f"# H{i}\n" + "text " * (i + 3) for i in range(20))
        chunk_size = 80
        for chunk in chunk_markdown(text, chunk_size=chunk_size, chunk_overlap=40):
            assert len(chunk.text) <= 2 * chunk_size

    def test_oversized_block_not_truncated(self) -> None:
        chunks = chunk_markdown("x" * 500, chunk_size=100, chunk_overlap=20)
        assert _texts(chunks) == ["x" * 500]

    def test_oversized_later_block_is_capped_with_warning(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="story_indexer.ingestion.chunker"):
            chunks = _texts(chunk_markdown("intro\n\n" + "x" * 500, chunk_size=100, chunk_overlap=20))

        assert [len(c) for c in chunks] == [5, 200]
        assert chunks[1] == "intro\n" + "x" * 194
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert warnings[0].args == (1, 200, 306)

    def test_no_warning_when_overlap_fits(self, caplog: pytest.LogCaptureFixture) -> None:
        text = "\n\n".join(["a" * 10, "b" * 10])
        with caplog.at_level(logging.WARNING, logger="story_indexer.ingestion.chunker"):
            chunk_markdown(text, chunk_size=10, chunk_overlap=4)
        assert caplog.records == []

    def test_without_overlap_blocks_reassemble_in_order(self) -> None:
        text = "# One\nfirst\n\n## Two\nsecond\n\nthird para\n\n# Four\nfourth"
        chunks = _texts(chunk_markdown(text, chunk_size=15, chunk_overlap=0))
        assert "\n".join(chunks) == "\n".join(split_blocks(text))

    @pytest.mark.parametrize(("size", "overlap"), [(0, 0), (-5, 0), (10, -1)])
    def test_rejects_invalid_parameters(self, size: int, overlap: int) -> None:
        with pytest.raises(ValueError):
            chunk_markdown("text", chunk_size=size, chunk_overlap=overlap)
