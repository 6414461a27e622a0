"""Pytest configuration and shared fixtures."""

import pytest

from chat_normalizer.attachments import SENTINEL


def make_record(name: str, file_type: str, size_kb: str, body: str) -> str:
    """Build an inlined attachment the way the upload path writes it."""
    return f"文件名: {name}\n类型: {file_type}\n大小: {size_kb} KB\n\n{body}"


@pytest.fixture
def single_attachment():
    return make_record("a.txt", "text/plain", "1.00", "HELLO")


@pytest.fixture
def two_attachments():
    first = make_record("a.txt", "text/plain", "1.00", "first body\nline two")
    second = make_record("b.py", "text/x-python", "2.50", "print('hi')")
    return first + SENTINEL + second


@pytest.fixture
def config_dir(tmp_path):
    return tmp_path / "config"


@pytest.fixture
def make_attachment():
    return make_record
