# -*- coding: utf-8 -*-
"""
File attachment records embedded in message text.

Uploaded files are inlined into the message as::

    文件名: notes.txt
    类型: text/plain
    大小: 1.00 KB

    <file content>

    ---

Each record is replaced with a short markdown link (the reference token)
whose ``file://`` href carries name, type and size. The original content can
be recovered from the extracted records or from the retained source text.
"""

import logging
import re
from enum import Enum
from typing import Iterable, List, NamedTuple, Optional, Tuple, Union
from urllib.parse import parse_qs, quote, unquote

from chat_normalizer.exceptions import AttachmentNotFoundError, InvalidReferenceError
from chat_normalizer.models import (
    AttachmentRecord,
    AttachmentRef,
    ExtractionResult,
    format_number,
    format_size_kb,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Record format (fixed: already stored messages use these exact strings)
# ---------------------------------------------------------------------------

FILE_NAME_LABEL = '文件名'
FILE_TYPE_LABEL = '类型'
FILE_SIZE_LABEL = '大小'
SIZE_UNIT = 'KB'
SENTINEL = '\n\n---\n\n'

UNKNOWN_FILE_TYPE = '未知类型'
FILE_ICON = '📄'
REFERENCE_SCHEME = 'file://'

_NAME_PREFIX = f'{FILE_NAME_LABEL}: '
_TYPE_PREFIX = f'{FILE_TYPE_LABEL}: '
_SIZE_PREFIX = f'{FILE_SIZE_LABEL}: '
_SIZE_SUFFIX = f' {SIZE_UNIT}'

_SIZE_PATTERN = re.compile(r'\d+(?:\.\d+)?')
_TOKEN_PATTERN = re.compile(
    re.escape(f'[{FILE_ICON} ') + r'[^\]\n]*\]\((' + re.escape(REFERENCE_SCHEME) + r'[^)\s]*)\)'
)
# The label is display only (the href carries the exact name); it must hold
# no brackets or backslashes, which later stages would read as math.
_LABEL_TRANSLATION = str.maketrans({'[': '(', ']': ')', '\\': None})

RefLike = Union[str, AttachmentRef, AttachmentRecord]


def _encode(value: str) -> str:
    """Percent-encode like encodeURIComponent, plus parentheses (they end a markdown link)."""
    return quote(value, safe="-_.!~*'")


def build_header(file_name: str, file_type: str, file_size_bytes: float) -> str:
    """Exact header string for a record, size rendered with two decimals."""
    return (
        f'{_NAME_PREFIX}{file_name}\n'
        f'{_TYPE_PREFIX}{file_type}\n'
        f'{_SIZE_PREFIX}{format_size_kb(file_size_bytes)}{_SIZE_SUFFIX}\n\n'
    )


def build_reference(file_name: str, file_type: str, file_size_bytes: float) -> str:
    """Markdown link that stands in for an extracted record."""
    label = file_name.translate(_LABEL_TRANSLATION)
    return (
        f'[{FILE_ICON} {label}]'
        f'({REFERENCE_SCHEME}{_encode(file_name)}'
        f'?type={_encode(file_type)}&size={format_number(file_size_bytes)})'
    )


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------

class _Stage(Enum):
    SEEK = 'seek'
    HEADER = 'header'
    BODY = 'body'
    DONE = 'done'


class _Header(NamedTuple):
    file_name: str
    file_type: str
    size_kb: float
    body_start: int


class _Splice(NamedTuple):
    start: int
    end: int
    replacement: str


def _read_line(text: str, pos: int, prefix: str) -> Optional[Tuple[str, int]]:
    """Read a non-empty ``prefix<value>\\n`` line at ``pos``; return (value, next_pos)."""
    if not text.startswith(prefix, pos):
        return None
    value_start = pos + len(prefix)
    line_end = text.find('\n', value_start)
    if line_end <= value_start:
        return None
    return text[value_start:line_end], line_end + 1


def _parse_header(text: str, start: int) -> Optional[_Header]:
    name_line = _read_line(text, start, _NAME_PREFIX)
    if name_line is None:
        return None
    file_name, pos = name_line

    type_line = _read_line(text, pos, _TYPE_PREFIX)
    if type_line is None:
        return None
    file_type, pos = type_line

    size_line = _read_line(text, pos, _SIZE_PREFIX)
    if size_line is None:
        return None
    size_text, pos = size_line
    # The size line must be followed by a blank line
    if not size_text.endswith(_SIZE_SUFFIX) or not text.startswith('\n', pos):
        return None
    size_value = size_text[:-len(_SIZE_SUFFIX)]
    if not _SIZE_PATTERN.fullmatch(size_value):
        return None

    return _Header(file_name, file_type, float(size_value), pos + 1)


def _find_body_end(text: str, body_start: int) -> Optional[int]:
    """End of a non-empty body: the next sentinel, else end of text."""
    if body_start >= len(text):
        return None
    end = text.find(SENTINEL, body_start + 1)
    return len(text) if end < 0 else end


def scan_attachments(text: str) -> List[AttachmentRecord]:
    """
    Find every attachment record in ``text``, in order of appearance.

    Single forward pass: seek the next name label, parse the three header
    lines, then take the body up to the sentinel or end of text. A label that
    does not start a well-formed header is skipped.
    """
    records: List[AttachmentRecord] = []
    stage = _Stage.SEEK
    pos = 0
    start = 0
    header: Optional[_Header] = None

    while stage is not _Stage.DONE:
        if stage is _Stage.SEEK:
            start = text.find(_NAME_PREFIX, pos)
            stage = _Stage.DONE if start < 0 else _Stage.HEADER

        elif stage is _Stage.HEADER:
            header = _parse_header(text, start)
            if header is None:
                pos = start + 1
                stage = _Stage.SEEK
            else:
                stage = _Stage.BODY

        elif stage is _Stage.BODY:
            end = _find_body_end(text, header.body_start)
            if end is None:
                pos = start + 1
                stage = _Stage.SEEK
                continue
            record = AttachmentRecord(
                file_name=header.file_name,
                file_type=header.file_type,
                file_size_bytes=header.size_kb * 1024,
                body=text[header.body_start:end],
                source_span=(start, end),
            )
            logger.debug(
                f"Attachment found: {record.file_name} ({record.file_type}, "
                f"{record.size_kb_label} KB) at {start}-{end}"
            )
            records.append(record)
            pos = end
            stage = _Stage.SEEK

    return records


def _apply_splices(text: str, splices: Iterable[_Splice]) -> str:
    parts = []
    last = 0
    for splice in sorted(splices, key=lambda s: s.start):
        parts.append(text[last:splice.start])
        parts.append(splice.replacement)
        last = splice.end
    parts.append(text[last:])
    return ''.join(parts)


def extract_attachments(text: str) -> ExtractionResult:
    """
    Replace every attachment record with its reference token.

    Returns:
        Text with tokens in place of header+body spans, and the records.
        Sentinels between records stay in the text.
    """
    if not text:
        return ExtractionResult(text=text, records=[])

    records = scan_attachments(text)
    if not records:
        return ExtractionResult(text=text, records=[])

    splices = [
        _Splice(r.source_span[0], r.source_span[1], r.reference)
        for r in records
    ]
    return ExtractionResult(text=_apply_splices(text, splices), records=records)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def parse_reference(href: str) -> AttachmentRef:
    """
    Decode the href of a reference token.

    Raises:
        InvalidReferenceError: not a file:// href, empty name or bad size
    """
    if not href or not href.startswith(REFERENCE_SCHEME):
        raise InvalidReferenceError(href or '', "not an attachment reference")

    path, _, query = href[len(REFERENCE_SCHEME):].partition('?')
    file_name = unquote(path)
    if not file_name:
        raise InvalidReferenceError(href, "attachment reference without file name")

    params = parse_qs(query, keep_blank_values=True)
    file_type = params.get('type', [UNKNOWN_FILE_TYPE])[0] or UNKNOWN_FILE_TYPE
    try:
        file_size_bytes = float(params.get('size', ['0'])[0] or 0)
    except ValueError:
        raise InvalidReferenceError(href, "attachment reference with bad size")

    return AttachmentRef(
        file_name=file_name,
        file_type=file_type,
        file_size_bytes=file_size_bytes,
    )


def find_reference_tokens(text: str) -> List[AttachmentRef]:
    """Decode every reference token in already normalized text."""
    refs = []
    for m in _TOKEN_PATTERN.finditer(text):
        try:
            refs.append(parse_reference(m.group(1)))
        except InvalidReferenceError as e:
            logger.warning(f"Skipping unreadable attachment token: {e.message}")
    return refs


def _as_ref(ref: RefLike) -> AttachmentRef:
    if isinstance(ref, str):
        return parse_reference(ref)
    if isinstance(ref, AttachmentRecord):
        return ref.ref
    return ref


def recover_body(source: str, ref: RefLike) -> Optional[str]:
    """
    Recover a file body by re-locating its header in the original text.

    Returns:
        The body, or None if the reconstructed header is not in ``source``
    """
    ref = _as_ref(ref)
    header = build_header(ref.file_name, ref.file_type, ref.file_size_bytes)
    start = source.find(header)
    if start < 0:
        logger.warning(f"Attachment header not found in source text: {ref.file_name}")
        return None

    body_start = start + len(header)
    end = _find_body_end(source, body_start)
    if end is None:
        return ''
    return source[body_start:end]


class AttachmentIndex:
    """
    Caller-held mapping from reference tokens to extracted records.

    Keeps the original text so bodies can still be recovered for tokens
    that are not in the record list.
    """

    def __init__(self, records: Iterable[AttachmentRecord], source: str = ''):
        self._records = list(records)
        self._source = source
        self._by_key = {}
        for record in self._records:
            # First occurrence wins for duplicate files
            self._by_key.setdefault(record.key, record)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    @property
    def records(self) -> List[AttachmentRecord]:
        return list(self._records)

    def lookup(self, ref: RefLike) -> AttachmentRecord:
        """
        Resolve a token href, ref or record to the extracted record.

        Raises:
            InvalidReferenceError: the href cannot be decoded
            AttachmentNotFoundError: no record matches the reference
        """
        ref = _as_ref(ref)
        record = self._by_key.get(ref.key)
        if record is None:
            raise AttachmentNotFoundError(ref.file_name, details={"key": list(ref.key)})
        return record

    def find_by_name(self, file_name: str) -> AttachmentRecord:
        for record in self._records:
            if record.file_name == file_name:
                return record
        raise AttachmentNotFoundError(file_name)

    def recover(self, ref: RefLike) -> Optional[str]:
        """Body for ``ref``: from the records first, then from the source text."""
        try:
            return self.lookup(ref).body
        except AttachmentNotFoundError:
            return recover_body(self._source, ref)
