"""
Shortcode generation and uniqueness checks.
"""

import random
import re
import string
from typing import Optional

from shortlink_app.errors import (
    InvalidShortcodeError,
    ShortcodeCollisionError,
    ShortcodeExhaustedError,
)
from shortlink_app.storage.strategies import ShortUrlStore

SHORTCODE_PATTERN = re.compile(r"^[A-Za-z0-9]{3,20}$")


def is_valid_shortcode(shortcode) -> bool:
    """Same shape rule at every entry point: 3-20 ASCII alphanumerics."""
    return isinstance(shortcode, str) and SHORTCODE_PATTERN.fullmatch(shortcode) is not None


class ShortcodeGenerator:
    """
    Random shortcodes checked against the store for uniqueness.

    Random codes are drawn independently per call, so collisions are
    possible and every candidate goes through ``store.exists``. The retry
    loop is capped: ``max_retries`` attempts at ``length``, then the same
    number at ``fallback_length`` (62^8 codes), then give up.
    """

    ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits

    def __init__(
        self,
        store: ShortUrlStore,
        length: int = 6,
        fallback_length: int = 8,
        max_retries: int = 5,
    ):
        self.store = store
        self.length = length
        self.fallback_length = fallback_length
        self.max_retries = max_retries

    def generate(self, length: Optional[int] = None) -> str:
        """Generate a random string of the given length (default ``self.length``)"""
        length = length or self.length
        return ''.join(random.choice(self.ALPHABET) for _ in range(length))

    def ensure_unique(self, candidate: Optional[str] = None) -> str:
        """
        Return a shortcode that is not in the store yet.

        Args:
            candidate: Custom shortcode requested by the client, if any

        Raises:
            InvalidShortcodeError: candidate has the wrong shape
            ShortcodeCollisionError: candidate is already taken
            ShortcodeExhaustedError: no free random code within the retry budget
            StoreError: the uniqueness probe itself failed
        """
        if candidate is not None:
            if not is_valid_shortcode(candidate):
                raise InvalidShortcodeError()
            if self.store.exists(candidate):
                raise ShortcodeCollisionError()
            return candidate

        for length in (self.length, self.fallback_length):
            for _ in range(self.max_retries):
                code = self.generate(length)
                if not self.store.exists(code):
                    return code

        raise ShortcodeExhaustedError(
            f"Could not generate unique shortcode after {self.max_retries} attempts "
            f"at lengths {self.length} and {self.fallback_length}"
        )
