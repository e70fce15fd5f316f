import pytest

from sipp.snippet.short_id import ALPHABET, DEFAULT_LENGTH, generate_short_id, is_short_id


def test_generate_short_id_uses_default_length_and_alphabet():
    for _ in range(200):
        short_id = generate_short_id()
        assert len(short_id) == DEFAULT_LENGTH
        assert set(short_id) <= set(ALPHABET)


def test_generate_short_id_honours_custom_length():
    assert len(generate_short_id(4)) == 4
    assert len(generate_short_id(32)) == 32


def test_generate_short_id_rejects_non_positive_length():
    with pytest.raises(ValueError):
        generate_short_id(0)


def test_alphabet_is_62_distinct_url_safe_characters():
    assert len(ALPHABET) == 62
    assert len(set(ALPHABET)) == 62
    assert ALPHABET.isalnum()


def test_generated_ids_are_not_repeated_in_practice():
    ids = {generate_short_id() for _ in range(1000)}
    assert len(ids) == 1000


def test_is_short_id():
    assert is_short_id("aZ09")
    assert is_short_id("abc", length=3)
    assert not is_short_id("abc", length=4)
    assert not is_short_id("ab-c")
    assert not is_short_id("")
