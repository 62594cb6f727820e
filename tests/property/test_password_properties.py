"""Property-based tests for temporary credential generation."""

from hypothesis import given, settings
from hypothesis import strategies as st

from travel_booking.core.security import PASSWORD_CHARACTER_CLASSES, generate_temporary_password

ALPHABET = set("".join(PASSWORD_CHARACTER_CLASSES))


@settings(max_examples=200)
@given(length=st.integers(min_value=4, max_value=128))
def test_password_has_every_character_class(length):
    password = generate_temporary_password(length)

    assert len(password) == length
    assert set(password) <= ALPHABET
    for group in PASSWORD_CHARACTER_CLASSES:
        assert any(c in group for c in password)


@given(length=st.integers(min_value=8, max_value=32))
def test_guaranteed_classes_are_not_pinned_to_the_front(length):
    # Shuffling means the first four characters are not always one per class
    samples = [generate_temporary_password(length) for _ in range(30)]
    prefixes = {
        tuple(next(i for i, group in enumerate(PASSWORD_CHARACTER_CLASSES) if c in group) for c in p[:4])
        for p in samples
    }
    assert len(prefixes) > 1
