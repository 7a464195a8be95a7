import pytest

from prepcore.errors import EmptyContentError, ValidationError
from prepcore.services.chunker import chunk_text, normalize_whitespace


def test_splits_into_consecutive_word_windows():
    words = [f"word{i}" for i in range(1200)]
    chunks = chunk_text(" ".join(words), 500)

    assert [len(c.split(" ")) for c in chunks] == [500, 500, 200]
    assert " ".join(chunks).split(" ") == words


def test_whitespace_runs_are_collapsed():
    text = "Senior   engineer\n\n\n\nwith\tPython and  distributed systems experience here"
    (chunk,) = chunk_text(text, 500)
    assert chunk == (
        "Senior engineer with Python and distributed systems experience here"
    )


def test_trailing_sliver_is_dropped():
    text = "alpha " * 1000 + "x y z"
    chunks = chunk_text(text, 500)

    assert len(chunks) == 2
    assert sum(len(c.split(" ")) for c in chunks) == 1000


@pytest.mark.parametrize("text", ["", "   \n\t  ", "only thirty characters here ok"])
def test_too_little_text_raises_empty_content(text):
    with pytest.raises(EmptyContentError):
        chunk_text(text)


def test_empty_content_is_a_validation_error():
    with pytest.raises(ValidationError):
        chunk_text("short")


@pytest.mark.parametrize("size", [0, -5, 2.5])
def test_rejects_bad_window_size(size):
    with pytest.raises(ValidationError):
        chunk_text("some text " * 40, size)


def test_normalize_whitespace_handles_none():
    assert normalize_whitespace(None) == ""
