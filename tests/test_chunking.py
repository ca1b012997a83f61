"""Tests for chunking and chunk identifiers."""

import pytest

from shared.helper.HelperChunking import (
    HelperChunking,
    estimate_token_count,
    format_chunk_id,
    parse_chunk_id,
    render_document_text,
    split_windows,
)
from shared.models.errors import InvalidParameters, MalformedIdentifier

BODY = "alpha beta gamma delta epsilon zeta"


class TestTokenEstimate:
    def test_empty_text_is_zero(self):
        assert estimate_token_count("") == 0

    def test_rounds_up(self):
        assert estimate_token_count("abcd") == 1
        assert estimate_token_count("abcde") == 2
        assert estimate_token_count("가" * 9) == 3


class TestChunkIds:
    def test_format(self):
        assert format_chunk_id("WORK-1", 3) == "WORK-1#chunk3"

    @pytest.mark.parametrize("document_id,index", [("WORK-1", 0), ("a#b", 12), ("업무-7", 5)])
    def test_parse_inverts_format(self, document_id, index):
        assert parse_chunk_id(format_chunk_id(document_id, index)) == (document_id, index)

    @pytest.mark.parametrize("chunk_id", ["WORK-1", "#chunk1", "WORK-1#chunk", "WORK-1#chunkx", "WORK-1#chunk-1"])
    def test_parse_rejects_malformed(self, chunk_id):
        with pytest.raises(MalformedIdentifier):
            parse_chunk_id(chunk_id)

    def test_format_rejects_separator_in_id(self):
        with pytest.raises(InvalidParameters):
            format_chunk_id("WORK#chunk1", 0)

    def test_format_rejects_negative_index(self):
        with pytest.raises(InvalidParameters):
            format_chunk_id("WORK-1", -1)


class TestSplitWindows:
    def test_breaks_at_whitespace(self):
        windows = split_windows("Title\n\n" + BODY, 20)
        assert windows == ["Title\n\nalpha beta", "gamma delta epsilon", "zeta"]

    def test_hard_splits_long_word(self):
        assert split_windows("abcdefghij", 4) == ["abcd", "efgh", "ij"]

    def test_windows_respect_limit(self):
        text = " ".join(f"word{i}" for i in range(200))
        windows = split_windows(text, 37)
        assert all(0 < len(window) <= 37 for window in windows)
        assert " ".join(windows) == text


class TestChunker:
    def test_empty_body_yields_title_only_chunk(self):
        chunks = HelperChunking().chunk("WORK-1", "Only a title", "")

        assert len(chunks) == 1
        assert chunks[0].chunk_id == "WORK-1#chunk0"
        assert chunks[0].text == "Only a title"
        assert chunks[0].metadata["scope"] == "WORK"
        assert chunks[0].metadata["work_id"] == "WORK-1"
        assert chunks[0].metadata["chunk_index"] == 0

    def test_short_document_is_single_chunk(self):
        chunks = HelperChunking().chunk("WORK-1", "Title", BODY)

        assert len(chunks) == 1
        assert chunks[0].text == render_document_text("Title", BODY) == f"Title\n\n{BODY}"

    def test_long_document_is_split_with_contiguous_indices(self):
        chunks = HelperChunking(chunk_size_tokens=5).chunk("WORK-1", "Title", BODY, {"person_ids": ["P1"]})

        assert [chunk.chunk_index for chunk in chunks] == [0, 1, 2]
        assert [chunk.chunk_id for chunk in chunks] == ["WORK-1#chunk0", "WORK-1#chunk1", "WORK-1#chunk2"]
        assert chunks[0].text.startswith("Title")
        assert all(chunk.metadata["person_ids"] == ["P1"] for chunk in chunks)

    def test_scope_metadata_is_not_shared_between_chunks(self):
        metadata = {"category": "ops"}
        chunks = HelperChunking(chunk_size_tokens=5).chunk("WORK-1", "Title", BODY, metadata)

        assert chunks[0].metadata is not chunks[1].metadata
        assert metadata == {"category": "ops"}

    def test_get_chunk_text_matches_chunk(self):
        chunking = HelperChunking(chunk_size_tokens=5)
        chunks = chunking.chunk("WORK-1", "Title", BODY)
        full_text = render_document_text("Title", BODY)

        for chunk in chunks:
            assert chunking.get_chunk_text(full_text, chunk.chunk_index) == chunk.text

    def test_get_chunk_text_out_of_range(self):
        chunking = HelperChunking(chunk_size_tokens=5)
        with pytest.raises(InvalidParameters):
            chunking.get_chunk_text(render_document_text("Title", BODY), 3)

    def test_long_title_without_body_stays_one_chunk(self):
        title = " ".join(["word"] * 600)

        chunks = HelperChunking().chunk("WORK-1", title, "")

        assert len(chunks) == 1
        assert chunks[0].chunk_id == "WORK-1#chunk0"
        assert chunks[0].text == title

    def test_document_chunk_text_follows_the_title_only_branch(self):
        chunking = HelperChunking(chunk_size_tokens=5)
        title = "a rather long title for a tiny chunk"

        assert chunking.get_document_chunk_text(title, "   ", 0) == title
        with pytest.raises(InvalidParameters):
            chunking.get_document_chunk_text(title, "", 1)

    def test_document_chunk_text_matches_chunk(self):
        chunking = HelperChunking(chunk_size_tokens=5)

        for chunk in chunking.chunk("WORK-1", "Title", BODY):
            assert chunking.get_document_chunk_text("Title", BODY, chunk.chunk_index) == chunk.text

    def test_rejects_non_positive_chunk_size(self):
        with pytest.raises(InvalidParameters):
            HelperChunking(chunk_size_tokens=0)
