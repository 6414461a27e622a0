# -*- coding: utf-8 -*-
"""
Link classification for the renderer's hyperlink hook.

The renderer turns every markdown link into an element; this decides which
one: an attachment card for reference tokens, an audio or video player for
media files, or a plain link opened in place or in a new tab.
"""

import re
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from chat_normalizer.attachments import REFERENCE_SCHEME, parse_reference
from chat_normalizer.exceptions import InvalidReferenceError
from chat_normalizer.models import AttachmentRef


AUDIO_EXTENSIONS = ('aac', 'mp3', 'opus', 'wav')
VIDEO_EXTENSIONS = ('3gp', '3g2', 'webm', 'ogv', 'mpeg', 'mp4', 'avi')

_AUDIO_PATTERN = re.compile(r'\.(%s)$' % '|'.join(AUDIO_EXTENSIONS))
_VIDEO_PATTERN = re.compile(r'\.(%s)$' % '|'.join(VIDEO_EXTENSIONS))
_INTERNAL_PATTERN = re.compile(r'^/#', re.IGNORECASE)


class LinkKind(str, Enum):
    ATTACHMENT = "attachment"
    BROKEN_ATTACHMENT = "broken_attachment"
    AUDIO = "audio"
    VIDEO = "video"
    INTERNAL = "internal"
    EXTERNAL = "external"


class LinkInfo(BaseModel):
    """Как отрисовать ссылку."""
    kind: LinkKind
    href: str
    target: Optional[str] = None
    attachment: Optional[AttachmentRef] = None


def classify_link(href: Optional[str], target: Optional[str] = None) -> LinkInfo:
    """
    Decide how a link should be rendered.

    Args:
        href: Link target as written in the markdown
        target: Explicit target attribute, kept for external links

    Returns:
        LinkInfo; attachment tokens carry the decoded reference
    """
    href = href or ''

    if href.startswith(REFERENCE_SCHEME):
        try:
            ref = parse_reference(href)
        except InvalidReferenceError:
            return LinkInfo(kind=LinkKind.BROKEN_ATTACHMENT, href=href)
        return LinkInfo(kind=LinkKind.ATTACHMENT, href=href, attachment=ref)

    if _AUDIO_PATTERN.search(href):
        return LinkInfo(kind=LinkKind.AUDIO, href=href)

    if _VIDEO_PATTERN.search(href):
        return LinkInfo(kind=LinkKind.VIDEO, href=href)

    if _INTERNAL_PATTERN.match(href):
        return LinkInfo(kind=LinkKind.INTERNAL, href=href, target="_self")

    return LinkInfo(kind=LinkKind.EXTERNAL, href=href, target=target or "_blank")
