"""Tests for sift.content.text helpers."""

from sift.content.text import (
    chunk_content,
    clean_content,
    extract_keywords,
    normalize_for_fingerprint,
    word_count,
)


class TestCleanContent:
    def test_collapses_whitespace(self):
        assert clean_content("  a \n b\t c  ") == "a b c"

    def test_keeps_paragraph_breaks(self):
        assert clean_content("  first   para \n \n\n second\tpara  ") == "first para\n\nsecond para"

    def test_normalises_quotes(self):
        assert clean_content("“quoted” ‘single’") == "\"quoted\" 'single'"

    def test_collapses_punctuation_runs(self):
        assert clean_content("wait..... what!!! really???") == "wait... what! really?"

    def test_empty(self):
        assert clean_content("") == ""


class TestNormalizeForFingerprint:
    def test_lowercases_and_strips_punctuation(self):
        assert normalize_for_fingerprint("Hello, World!") == "hello world"

    def test_collapses_whitespace(self):
        assert normalize_for_fingerprint("  a   b ") == "a b"


class TestExtractKeywords:
    def test_ranks_by_frequency(self):
        keywords = extract_keywords("vector search vector store vector")
        assert keywords[0].word == "vector"
        assert keywords[0].count == 3

    def test_skips_short_words_and_stopwords(self):
        words = {k.word for k in extract_keywords("the cat sat about those things")}
        assert words == {"things"}

    def test_limit(self):
        text = " ".join(f"word{i}" for i in range(20))
        assert len(extract_keywords(text, limit=5)) == 5

    def test_ties_keep_first_seen_order(self):
        keywords = extract_keywords("zebra apple mango")
        assert [k.word for k in keywords] == ["zebra", "apple", "mango"]

    def test_empty(self):
        assert extract_keywords("") == []


class TestChunkContent:
    def test_short_text_single_chunk(self):
        assert chunk_content("short") == ["short"]

    def test_long_text_overlaps(self):
        text = "Sentence number one is here. " * 100
        chunks = chunk_content(text, max_chunk_size=300, overlap=50)
        assert len(chunks) > 1
        assert all(len(c) <= 300 for c in chunks)

    def test_prefers_sentence_boundaries(self):
        text = "Sentence number one is here. " * 100
        chunks = chunk_content(text, max_chunk_size=300, overlap=50)
        assert chunks[0].endswith(".")

    def test_prefers_paragraph_breaks_in_cleaned_text(self):
        paragraph = "word " * 40
        text = clean_content("\n\n".join([paragraph] * 5))
        chunks = chunk_content(text, max_chunk_size=300, overlap=50)
        assert len(chunks) > 1
        assert chunks[0] == paragraph.strip()


class TestWordCount:
    def test_counts(self):
        assert word_count("one two  three") == 3

    def test_empty(self):
        assert word_count("") == 0
