"""Tests for link classification."""

from chat_normalizer.attachments import build_reference
from chat_normalizer.links import LinkKind, classify_link
from chat_normalizer.pipeline import normalize


class TestClassifyLink:
    """Test how links map to renderer elements."""

    def test_attachment(self):
        info = classify_link("file://a.txt?type=text%2Fplain&size=1024")
        assert info.kind == LinkKind.ATTACHMENT
        assert info.attachment.file_name == "a.txt"
        assert info.attachment.file_size_bytes == 1024

    def test_broken_attachment(self):
        info = classify_link("file://a.txt?size=nope")
        assert info.kind == LinkKind.BROKEN_ATTACHMENT
        assert info.attachment is None

    def test_audio(self):
        assert classify_link("https://x.org/song.mp3").kind == LinkKind.AUDIO
        assert classify_link("clip.opus").kind == LinkKind.AUDIO

    def test_video(self):
        assert classify_link("https://x.org/movie.mp4").kind == LinkKind.VIDEO
        assert classify_link("a.3g2").kind == LinkKind.VIDEO

    def test_extension_must_be_suffix(self):
        assert classify_link("https://x.org/song.mp3?dl=1").kind == LinkKind.EXTERNAL

    def test_internal_anchor(self):
        info = classify_link("/#/chat")
        assert info.kind == LinkKind.INTERNAL
        assert info.target == "_self"

    def test_external(self):
        info = classify_link("https://example.com")
        assert info.kind == LinkKind.EXTERNAL
        assert info.target == "_blank"

    def test_external_keeps_target(self):
        assert classify_link("https://example.com", target="_top").target == "_top"

    def test_empty_href(self):
        assert classify_link(None).kind == LinkKind.EXTERNAL

    def test_token_from_pipeline(self, single_attachment):
        """Test that the pipeline's token href classifies as an attachment."""
        text = normalize(single_attachment).text
        href = text[text.index("(") + 1:-1]
        assert classify_link(href).kind == LinkKind.ATTACHMENT
        assert text == build_reference("a.txt", "text/plain", 1024)

