"""
Tests for Room Code Generation
"""

import random

from relay import ROOM_CODE_ALPHABET, ROOM_CODE_LENGTH, RoomCodeGenerator


def test_alphabet_excludes_confusable_characters():
    for ch in "0O1I":
        assert ch not in ROOM_CODE_ALPHABET
    assert len(set(ROOM_CODE_ALPHABET)) == len(ROOM_CODE_ALPHABET)


def test_generated_codes_have_fixed_length_and_alphabet():
    generator = RoomCodeGenerator()
    for _ in range(200):
        code = generator.generate()
        assert len(code) == ROOM_CODE_LENGTH == 6
        assert all(ch in ROOM_CODE_ALPHABET for ch in code)
        assert generator.is_valid(code)


def test_seeded_generator_is_reproducible():
    first = RoomCodeGenerator(rng=random.Random(7))
    second = RoomCodeGenerator(rng=random.Random(7))
    assert [first.generate() for _ in range(5)] == [
        second.generate() for _ in range(5)
    ]


def test_is_valid_rejects_bad_codes():
    generator = RoomCodeGenerator()
    assert not generator.is_valid("ABC")
    assert not generator.is_valid("ABCDE0")
    assert not generator.is_valid("abcdef")
    assert not generator.is_valid(None)
