"""Tests for the full normalization pipeline."""

from concurrent.futures import ThreadPoolExecutor

from chat_normalizer.attachments import SENTINEL, find_reference_tokens
from chat_normalizer.models import NormalizerConfig
from chat_normalizer.pipeline import Normalizer, normalize


PAGE = "<!DOCTYPE html><html><body>hi</body></html>"


class TestNormalize:
    """Test stage composition."""

    def test_plain_text(self):
        message = normalize("Hello there.")
        assert message.text == "Hello there."
        assert message.attachments == []
        assert message.source == "Hello there."

    def test_none_treated_as_empty(self):
        assert normalize(None).text == ""

    def test_attachment_round_trip(self, single_attachment):
        """Test extraction and recovery through the pipeline."""
        message = normalize(single_attachment)
        assert message.text.startswith("[📄 a.txt](file://a.txt?")
        assert len(message.attachments) == 1
        record = message.attachments[0]
        assert (record.file_name, record.file_type, record.file_size_bytes, record.body) == (
            "a.txt", "text/plain", 1024, "HELLO"
        )
        ref = find_reference_tokens(message.text)[0]
        assert message.recover(ref) == "HELLO"
        assert message.lookup(ref) == record

    def test_attachment_body_not_escaped(self, make_attachment):
        """Test that math in a file body never reaches the escaper."""
        raw = make_attachment("m.tex", "text/x-tex", "1.00", "\\(x\\)") + SENTINEL + "What is \\(x\\)?"
        message = normalize(raw)
        assert message.text.endswith("What is $x$?")
        assert message.attachments[0].body == "\\(x\\)"

    def test_think_then_math(self):
        """Test that math inside reasoning is escaped before quoting."""
        message = normalize("<think>try \\(x\\)</think>Answer: \\[x\\]")
        assert "> try $x$" in message.text
        assert message.text.endswith("</details>Answer: $$x$$")

    def test_html_after_think(self):
        """Test that a page in the answer is fenced after the think block."""
        message = normalize("<think>plan</think>" + PAGE)
        assert "</details>\n```html\n<!DOCTYPE html>" in message.text
        assert message.text.endswith("</html>\n```\n")

    def test_html_with_existing_fence_untouched(self):
        raw = "```css\nbody {}\n```\n" + PAGE
        assert normalize(raw).text == raw

    def test_idempotent_on_escaping_and_fencing(self):
        """Test that normalizing normalized text is a no-op."""
        raw = "Let \\(a\\) be:\n" + PAGE
        once = normalize(raw).text
        assert normalize(once).text == once

    def test_bracketed_file_name_not_turned_into_math(self, make_attachment):
        """Test that a token label survives the bracket escaper."""
        message = normalize(make_attachment("x[1].txt", "text/plain", "1.00", "B"))
        assert message.text == "[📄 x(1).txt](file://x%5B1%5D.txt?type=text%2Fplain&size=1024)"
        assert "$" not in message.text
        ref = find_reference_tokens(message.text)[0]
        assert ref.file_name == "x[1].txt"
        assert message.recover(ref) == "B"

    def test_code_span_protected_end_to_end(self):
        raw = "Write `\\(x\\)` or `<!DOCTYPE html>` literally."
        assert normalize(raw).text == raw

    def test_deterministic(self, two_attachments):
        first = normalize(two_attachments)
        second = normalize(two_attachments)
        assert first == second

    def test_parallel_messages(self, make_attachment):
        """Test that messages processed concurrently do not interfere."""
        raws = [make_attachment(f"f{i}.txt", "text/plain", "1.00", f"body {i}") for i in range(20)]
        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(normalize, raws))
        for i, message in enumerate(results):
            assert message.attachments[0].body == f"body {i}"


class TestNormalizerConfig:
    """Test stage switches and labels."""

    def test_disable_attachments(self, single_attachment):
        message = Normalizer(NormalizerConfig(enable_attachment_links=False)).normalize(single_attachment)
        assert message.text == single_attachment
        assert message.attachments == []

    def test_disable_escaping(self):
        raw = "\\(x\\)"
        assert Normalizer(NormalizerConfig(escape_brackets=False)).normalize(raw).text == raw

    def test_disable_think(self):
        raw = "<think>x</think>y"
        assert Normalizer(NormalizerConfig(format_think=False)).normalize(raw).text == raw

    def test_disable_html(self):
        assert Normalizer(NormalizerConfig(wrap_html=False)).normalize(PAGE).text == PAGE

    def test_labels(self):
        config = NormalizerConfig(thinking_label="思考中", think_done_label="已深度思考")
        normalizer = Normalizer(config)
        assert "<summary>思考中 " in normalizer.normalize("<think>a").text
        assert "<summary>已深度思考</summary>" in normalizer.normalize("<think>a</think>").text
