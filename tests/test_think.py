"""Tests for the leading <think> block formatter."""

from chat_normalizer.think import format_think_text, quote_lines, scan_think_block


class TestScanThinkBlock:
    """Test detection of the leading think block."""

    def test_no_tag(self):
        assert scan_think_block("hello") is None

    def test_tag_not_at_start(self):
        """Test that a think tag mid-text is not recognized."""
        assert scan_think_block("answer <think>x</think>") is None

    def test_in_progress(self):
        block = scan_think_block("<think>abc")
        assert block.open
        assert not block.terminated
        assert block.content == "abc"
        assert block.end == len("<think>abc")

    def test_completed(self):
        block = scan_think_block("<think>abc</think>rest")
        assert block.open
        assert block.terminated
        assert block.content == "abc"
        assert block.end == len("<think>abc</think>")


class TestQuoteLines:
    """Test block quoting of think content."""

    def test_each_line_quoted(self):
        assert quote_lines("a\nb") == "> a\n> b"

    def test_blank_lines_bare(self):
        """Test that empty and whitespace-only lines become '>'."""
        assert quote_lines("a\n\n   \nb") == "> a\n>\n>\n> b"


class TestFormatThinkText:
    """Test rendering of think blocks."""

    def test_in_progress(self):
        """Test an open tag without a closing tag."""
        result = format_think_text("<think>hello\nworld")
        assert result.startswith("<details open>\n<summary>")
        assert 'class="thinking-loader"' in result
        assert "\n\n> hello\n> world\n\n</details>" in result
        assert result.endswith("</details>")

    def test_completed(self):
        """Test a closed block followed by the answer."""
        result = format_think_text("<think>hello</think>rest")
        assert result == (
            "<details open>\n"
            "<summary>Thought process</summary>\n"
            "\n"
            "> hello\n"
            "\n"
            "</details>rest"
        )

    def test_completed_has_no_spinner(self):
        result = format_think_text("<think>x</think>")
        assert "thinking-loader" not in result

    def test_only_first_closing_tag_used(self):
        """Test that text after the first </think> is kept verbatim."""
        result = format_think_text("<think>a</think>b</think>c")
        assert result.endswith("</details>b</think>c")

    def test_custom_labels(self):
        result = format_think_text("<think>x", thinking_label="思考中")
        assert "<summary>思考中 " in result
        result = format_think_text("<think>x</think>", done_label="Reasoning")
        assert "<summary>Reasoning</summary>" in result

    def test_no_tag_unchanged(self):
        text = "No reasoning here.\n<think>late</think>"
        assert format_think_text(text) == text

    def test_empty_open_tag(self):
        """Test a tag that just started streaming."""
        result = format_think_text("<think>")
        assert "\n\n>\n\n</details>" in result
