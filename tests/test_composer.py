"""
Tests for the report message composer: pagination and block layout.
"""

import pytest

from app.reporting.composer import MAX_BLOCK_TEXT, build_report_blocks, paginate


def _lines(n: int, width: int = 79) -> str:
    return "".join(f"{i:04d} " + "x" * (width - 5) + "\n" for i in range(n))


SAMPLES = [
    "",
    "short",
    "a" * MAX_BLOCK_TEXT,
    "a" * (MAX_BLOCK_TEXT + 1),
    "b" * 10_000,
    _lines(200),
    _lines(40) + "y" * 5000 + "\n" + _lines(40),
    "\n" * 7000,
    ("x" * 1400 + "\n") * 6,
]


class TestPaginate:
    @pytest.mark.parametrize("text", SAMPLES)
    def test_chunks_rejoin_to_original(self, text):
        assert "".join(paginate(text)) == text

    @pytest.mark.parametrize("text", ["", "hello", "x\n" * 1500, "z" * MAX_BLOCK_TEXT])
    def test_text_within_limit_is_one_chunk(self, text):
        assert paginate(text) == [text]

    @pytest.mark.parametrize("text", [t for t in SAMPLES if len(t) > MAX_BLOCK_TEXT])
    def test_long_text_chunks_are_bounded_and_non_empty(self, text):
        chunks = paginate(text)
        assert len(chunks) > 1
        assert all(len(c) <= MAX_BLOCK_TEXT for c in chunks)
        assert all(c for c in chunks)

    def test_cuts_at_newline_past_midpoint(self):
        text = "a" * 2000 + "\n" + "b" * 2000
        chunks = paginate(text)
        assert chunks == ["a" * 2000, "\n" + "b" * 2000]

    def test_hard_cut_when_newline_before_midpoint(self):
        text = "a" * 1000 + "\n" + "b" * 3000
        chunks = paginate(text)
        assert len(chunks[0]) == MAX_BLOCK_TEXT
        assert chunks[0] == text[:MAX_BLOCK_TEXT]

    def test_hard_cut_without_any_newline(self):
        chunks = paginate("c" * 7000)
        assert [len(c) for c in chunks] == [3000, 3000, 1000]

    def test_last_chunk_is_not_split_on_newline(self):
        # 3000 + "\n" + 100 chars: first chunk is hard-cut, the tail fits whole
        text = "d" * 3000 + "\n" + "e" * 100
        assert paginate(text) == ["d" * 3000, "\n" + "e" * 100]

    def test_custom_limit(self):
        chunks = paginate("line one\nline two\nline three", limit=12)
        assert "".join(chunks) == "line one\nline two\nline three"
        assert all(len(c) <= 12 for c in chunks)


class TestBuildReportBlocks:
    def test_layout_with_chart(self):
        blocks = build_report_blocks("acme", "analysis", "https://chart/x.png")

        assert [b["type"] for b in blocks] == ["header", "divider", "image", "section"]
        assert blocks[0]["text"]["text"] == "📊 acme Analytics"
        assert blocks[2]["image_url"] == "https://chart/x.png"
        assert "acme" in blocks[2]["alt_text"]
        assert blocks[3]["text"] == {"type": "mrkdwn", "text": "analysis"}

    def test_layout_without_chart(self):
        blocks = build_report_blocks("acme", "analysis", None)
        assert [b["type"] for b in blocks] == ["header", "divider", "section"]

    def test_empty_analysis_still_gets_a_section(self):
        blocks = build_report_blocks("acme", "", None)
        assert blocks[-1] == {"type": "section", "text": {"type": "mrkdwn", "text": ""}}

    def test_long_analysis_spans_several_sections(self):
        analysis = _lines(120)
        blocks = build_report_blocks("acme", analysis, None)
        sections = [b["text"]["text"] for b in blocks if b["type"] == "section"]

        assert len(sections) > 1
        assert "".join(sections) == analysis
