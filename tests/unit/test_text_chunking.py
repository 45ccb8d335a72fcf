"""Unit tests for narration text chunking."""

import pytest

from page_narrator.domain.services import chunk_text


class TestChunkText:
    """Test cases for chunk_text."""

    def test_blank_text_gives_no_chunks(self):
        assert chunk_text("", 10) == []
        assert chunk_text("   \n\t ", 10) == []

    def test_short_text_is_one_chunk(self):
        assert chunk_text("  Olá mundo.  ", 3000) == ["Olá mundo."]

    def test_invalid_limit(self):
        with pytest.raises(ValueError):
            chunk_text("text", 0)

    def test_prefers_sentence_boundaries(self):
        text = "First sentence here. Second one. Third!"
        assert chunk_text(text, 25) == ["First sentence here.", "Second one. Third!"]

    def test_splits_long_sentence_on_words(self):
        chunks = chunk_text("alpha beta gamma delta epsilon", 11)

        assert chunks == ["alpha beta", "gamma delta", "epsilon"]

    def test_hard_splits_words_longer_than_limit(self):
        assert chunk_text("abcdefghij", 4) == ["abcd", "efgh", "ij"]

    def test_every_chunk_respects_limit(self):
        text = " ".join(f"Sentence number {i} has a few words." for i in range(200))

        chunks = chunk_text(text, 100)

        assert len(chunks) > 1
        assert all(0 < len(chunk) <= 100 for chunk in chunks)

    def test_chunks_preserve_order_and_words(self):
        text = " ".join(f"word{i}" for i in range(500))

        chunks = chunk_text(text, 50)

        assert " ".join(chunks).split() == text.split()
