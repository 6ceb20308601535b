"""
Tests for shortcode generation and uniqueness checks.
"""
import re

import pytest

from shortlink_app.errors import (
    InvalidShortcodeError,
    ShortcodeCollisionError,
    ShortcodeExhaustedError,
)
from shortlink_app.services.shortcode import ShortcodeGenerator, is_valid_shortcode


class FakeStore:
    """Only what the generator needs: exists()."""

    def __init__(self, taken=(), taken_lengths=()):
        self.taken = set(taken)
        self.taken_lengths = set(taken_lengths)
        self.probes = []

    def exists(self, shortcode):
        self.probes.append(shortcode)
        return shortcode in self.taken or len(shortcode) in self.taken_lengths


class TestGenerate:
    """Test random code generation"""

    def test_generates_six_alphanumeric_characters(self):
        """Sampled 10,000 times, every code is 6 alphanumerics"""
        generator = ShortcodeGenerator(FakeStore())
        pattern = re.compile(r"^[A-Za-z0-9]{6}$")

        for _ in range(10_000):
            assert pattern.match(generator.generate())

    def test_alphabet_is_62_characters(self):
        assert len(set(ShortcodeGenerator.ALPHABET)) == 62

    def test_explicit_length(self):
        generator = ShortcodeGenerator(FakeStore())
        assert len(generator.generate(8)) == 8


class TestEnsureUnique:
    """Test uniqueness enforcement against the store"""

    def test_custom_candidate_returned_when_free(self):
        generator = ShortcodeGenerator(FakeStore())
        assert generator.ensure_unique("abc") == "abc"

    def test_custom_candidate_taken(self):
        generator = ShortcodeGenerator(FakeStore(taken={"abc"}))
        with pytest.raises(ShortcodeCollisionError):
            generator.ensure_unique("abc")

    @pytest.mark.parametrize("candidate", ["ab", "a" * 21, "ab-c", "ab_c", "héllo", "ab c"])
    def test_custom_candidate_bad_shape(self, candidate):
        store = FakeStore()
        generator = ShortcodeGenerator(store)
        with pytest.raises(InvalidShortcodeError):
            generator.ensure_unique(candidate)
        # Rejected before touching the store
        assert store.probes == []

    def test_generated_code_skips_taken_ones(self):
        store = FakeStore()
        generator = ShortcodeGenerator(store)
        code = generator.ensure_unique()
        assert len(code) == 6
        assert store.probes == [code]

    def test_falls_back_to_longer_codes(self):
        """All 6-character codes taken: widen to 8 after max_retries"""
        store = FakeStore(taken_lengths={6})
        generator = ShortcodeGenerator(store, max_retries=5)

        code = generator.ensure_unique()

        assert len(code) == 8
        assert len(store.probes) == 6

    def test_gives_up_after_both_tiers(self):
        store = FakeStore(taken_lengths={6, 8})
        generator = ShortcodeGenerator(store, max_retries=3)

        with pytest.raises(ShortcodeExhaustedError):
            generator.ensure_unique()

        assert len(store.probes) == 6


class TestShapeCheck:
    @pytest.mark.parametrize("shortcode", ["abc", "ABC123", "a" * 20, "0x9"])
    def test_valid(self, shortcode):
        assert is_valid_shortcode(shortcode)

    @pytest.mark.parametrize("shortcode", ["", "ab", "a" * 21, "abc!", None, 123])
    def test_invalid(self, shortcode):
        assert not is_valid_shortcode(shortcode)
