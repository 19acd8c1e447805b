"""Tests for the input guard."""

import pytest

from errors import EmptyMessage, MessageTooLong, MissingMessage, SpamLike
from guard import MAX_CHARS, looks_like_spam, validate_message


def test_returns_trimmed_message():
    assert validate_message("  What projects has Pranjal built?  ") == "What projects has Pranjal built?"


@pytest.mark.parametrize("raw", [None, 42, ["hi"], {"text": "hi"}])
def test_missing_or_non_string(raw):
    with pytest.raises(MissingMessage) as exc:
        validate_message(raw)
    assert exc.value.status_code == 400
    assert exc.value.message == "Provide 'message' (string)"


@pytest.mark.parametrize("raw", ["", "   ", "\n\t "])
def test_empty_after_trim(raw):
    with pytest.raises(EmptyMessage) as exc:
        validate_message(raw)
    assert exc.value.message == "Empty message"


def test_exactly_max_length_passes():
    msg = "a" * MAX_CHARS
    assert validate_message(msg) == msg


def test_one_over_max_length_rejected():
    with pytest.raises(MessageTooLong) as exc:
        validate_message("a" * (MAX_CHARS + 1))
    assert exc.value.status_code == 413
    assert exc.value.message == "Message too long (max 800 chars)"


def test_length_is_measured_after_trimming():
    msg = "  " + "a" * MAX_CHARS + "  "
    assert validate_message(msg) == "a" * MAX_CHARS


def test_custom_max_chars():
    with pytest.raises(MessageTooLong, match="max 10 chars"):
        validate_message("a" * 11, max_chars=10)


def test_too_long_checked_before_spam():
    with pytest.raises(MessageTooLong):
        validate_message("giveaway " * 200)


@pytest.mark.parametrize(
    "text",
    [
        "check https://aaaaaaaaaaaaaaaaa now",  # 25-character link
        "see http://example.com/some/long/path",
        "visit www.example.com/promo-code-123",
        "go to example.com/really/long/path/here",
        "grab it at cheap-deals.xyz/promo/today",
    ],
)
def test_long_links_are_spam(text):
    with pytest.raises(SpamLike) as exc:
        validate_message(text)
    assert exc.value.status_code == 400
    assert exc.value.message == "Message looks like spam. Try rephrasing."


def test_short_link_is_allowed():
    assert validate_message("is http://a.io his?") == "is http://a.io his?"


@pytest.mark.parametrize("text", ["Free money inside", "FREEMONEY", "join the giveaway"])
def test_spam_phrases(text):
    with pytest.raises(SpamLike):
        validate_message(text)


@pytest.mark.parametrize("text", ["Привет, кто это?", "你好", "hello 😀", "price in €", "a <b> tag", "Bernabéu"])
def test_characters_outside_whitelist(text):
    assert looks_like_spam(text) is True


def test_whitelisted_ascii_always_passes_charset_check():
    text = "Hi! What's Pranjal's stack (Java/.NET + SQL)? 100% curious: tell me; \"quotes\" & more - ok, @you."
    assert looks_like_spam(text) is False
    assert validate_message(text) == text


def test_every_whitelisted_character_passes():
    letters = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_"
    punctuation = ".,?!@()-+/'\":;%&"
    assert looks_like_spam(letters + " " + punctuation) is False


@pytest.mark.parametrize(
    "text",
    [
        "Does he know Node.js/Express.js/MongoDB?",
        "Has he used Vue.js/Next.js/Nuxt.js?",
        "Spring Boot/Hibernate/ASP.NET Core/Entity Framework?",
        "Any experience with React.js/Redux.js/Tailwind.css?",
    ],
)
def test_slash_joined_tech_stacks_are_not_links(text):
    assert looks_like_spam(text) is False
    assert validate_message(text) == text
