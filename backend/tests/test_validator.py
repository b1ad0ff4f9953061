import pytest

from emoji_tweets.core.errors import InvalidContentError
from emoji_tweets.services.validator import (
    EMPTY_CONTENT_MESSAGE,
    MAX_CONTENT_LENGTH,
    NOT_EMOJI_MESSAGE,
    TOO_LONG_MESSAGE,
    is_emoji_only,
    validate_content,
)


@pytest.mark.parametrize(
    "content",
    [
        "😀",
        "🔥🔥🔥",
        "👍🏽",
        "\U0001F468\u200d\U0001F469\u200d\U0001F467",
        "🇫🇷",
        "\u2764\ufe0f",
        "1\ufe0f\u20e3",
        "😀" * MAX_CONTENT_LENGTH,
    ],
)
def test_emoji_content_is_accepted(content):
    validate_content(content)


def test_empty_content_fails_first_rule():
    with pytest.raises(InvalidContentError) as exc_info:
        validate_content("")
    assert str(exc_info.value) == EMPTY_CONTENT_MESSAGE


@pytest.mark.parametrize("content", ["😀" * (MAX_CONTENT_LENGTH + 1), "a" * 500])
def test_too_long_content_fails_regardless_of_characters(content):
    with pytest.raises(InvalidContentError) as exc_info:
        validate_content(content)
    assert str(exc_info.value) == TOO_LONG_MESSAGE


@pytest.mark.parametrize(
    "content",
    ["hello", "😀a", "1", "123", "#", "😀 😀", "😀!", "\u200d", "\ufe0f", "\U0001FAFF", "😀\U0001FAFF"],
)
def test_non_emoji_characters_are_rejected(content):
    with pytest.raises(InvalidContentError) as exc_info:
        validate_content(content)
    assert str(exc_info.value) == NOT_EMOJI_MESSAGE


def test_is_emoji_only_checks_every_cluster():
    assert is_emoji_only("😀😃")
    assert not is_emoji_only("😀x😃")


def test_invalid_content_error_is_exposed_to_clients():
    err = InvalidContentError(NOT_EMOJI_MESSAGE)
    assert err.status_code == 400
    assert err.to_dict() == {"code": "BAD_REQUEST", "message": NOT_EMOJI_MESSAGE}
