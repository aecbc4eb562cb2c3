import pytest

from text_wrap import truncate, wrap_text

SAMPLES = [
    "Migrate the billing platform to the new event bus",
    "short",
    "  leading   and trailing   whitespace  ",
    "Supercalifragilisticexpialidocious is a long word indeed",
    "a b c d e f g h i j k l m n o p q r s t u v w x y z",
]


def test_wrap_empty_input():
    assert wrap_text("", 10) == []
    assert wrap_text("   ", 10) == []


@pytest.mark.parametrize("text", SAMPLES)
@pytest.mark.parametrize("width", [5, 12, 28, 36])
def test_wrap_preserves_words(text, width):
    lines = wrap_text(text, width)
    assert " ".join(lines) == " ".join(text.split())


@pytest.mark.parametrize("text", SAMPLES)
@pytest.mark.parametrize("width", [5, 12, 28, 36])
def test_wrap_respects_width_except_long_words(text, width):
    for line in wrap_text(text, width):
        assert len(line) <= width or " " not in line


def test_long_word_gets_its_own_line():
    assert wrap_text("tiny Supercalifragilistic end", 8) == ["tiny", "Supercalifragilistic", "end"]


def test_wrap_greedy_fill():
    assert wrap_text("one two three four", 9) == ["one two", "three", "four"]


def test_truncate():
    assert truncate("Short", 20) == "Short"
    assert truncate("A title that is definitely too long", 20) == "A title that is d..."
    assert len(truncate("A title that is definitely too long", 20)) == 20
    assert truncate("", 20) == ""
