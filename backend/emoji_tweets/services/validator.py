"""Content rules for post bodies.

Rules are checked in order and the first failure wins:

1. at least ``MIN_CONTENT_LENGTH`` code point
2. at most ``MAX_CONTENT_LENGTH`` code points
3. emoji only
"""
import regex

from ..core.errors import InvalidContentError

MIN_CONTENT_LENGTH = 1
MAX_CONTENT_LENGTH = 280

EMPTY_CONTENT_MESSAGE = "Post must contain at least 1 character"
TOO_LONG_MESSAGE = f"Post must contain at most {MAX_CONTENT_LENGTH} characters"
NOT_EMOJI_MESSAGE = "Only Emoji's are accepted"

_GRAPHEME = regex.compile(r"\X")
# Extended_Pictographic also covers reserved code points, so only assigned ones count.
_EMOJI_CLUSTER = regex.compile(r"(?V1)[[\p{Extended_Pictographic}\p{Emoji_Component}]&&\p{Assigned}]+")
# Digits, '#', '*', ZWJ and U+FE0F are emoji components only next to one of these.
_EMOJI_ANCHOR = regex.compile(r"(?V1)[[\p{Extended_Pictographic}\p{Emoji_Modifier}\U0001F1E6-\U0001F1FF\u20e3]&&\p{Assigned}]")


def is_emoji_only(content: str) -> bool:
    for cluster in _GRAPHEME.findall(content):
        if not _EMOJI_CLUSTER.fullmatch(cluster) or not _EMOJI_ANCHOR.search(cluster):
            return False
    return True


def validate_content(content: str) -> None:
    """Raise InvalidContentError naming the first rule ``content`` breaks."""
    length = len(content)
    if length < MIN_CONTENT_LENGTH:
        raise InvalidContentError(EMPTY_CONTENT_MESSAGE)
    if length > MAX_CONTENT_LENGTH:
        raise InvalidContentError(TOO_LONG_MESSAGE)
    if not is_emoji_only(content):
        raise InvalidContentError(NOT_EMOJI_MESSAGE)
