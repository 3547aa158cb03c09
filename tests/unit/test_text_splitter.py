"""Tests for greedy text chunking."""

import pytest

from voice_studio.text_splitter import split_text


class TestSplitText:
    def test_short_text_is_single_chunk(self):
        assert split_text("Hello world.", 100) == ["Hello world."]

    def test_text_exactly_at_limit_is_not_split(self):
        text = "a" * 10
        assert split_text(text, 10) == [text]

    def test_empty_and_whitespace_only_give_no_chunks(self):
        assert split_text("", 10) == []
        assert split_text("   \n  ", 10) == []

    def test_prefers_sentence_end_then_whitespace(self):
        text = "Hello world. This is a test. Another sentence here."

        assert split_text(text, 20) == ["Hello world.", "This is a test.", "Another sentence", "here."]

    def test_falls_back_to_newline_before_space(self):
        text = "line one is here\nline two"

        assert split_text(text, 20) == ["line one is here", "line two"]

    def test_hard_cut_without_any_separator(self):
        text = "a" * 25

        assert split_text(text, 10) == ["a" * 10, "a" * 10, "a" * 5]

    def test_separator_at_start_does_not_stall(self):
        text = " " + "b" * 15

        assert split_text(text, 10) == ["b" * 10, "b" * 5]

    def test_chunks_respect_limit_and_keep_all_words(self):
        text = ("Lorem ipsum dolor sit amet, consectetur adipiscing elit. " * 40).strip()

        chunks = split_text(text, 120)

        assert all(0 < len(chunk) <= 120 for chunk in chunks)
        assert " ".join(chunks).split() == text.split()

    def test_long_paragraphs_split_at_sentence_boundaries(self):
        sentence = "This sentence is exactly fifty characters long ok. "
        text = (sentence * 4).strip()

        chunks = split_text(text, 120)

        assert all(chunk.endswith(".") for chunk in chunks)

    @pytest.mark.parametrize("limit", [0, -5])
    def test_non_positive_limit_rejected(self, limit):
        with pytest.raises(ValueError):
            split_text("text", limit)
