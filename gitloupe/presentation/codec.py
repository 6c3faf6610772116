"""
HashCodec — Deterministic AA-BB aliases for object hashes

Forty hex characters are hard to read aloud or retype. Every object hash
maps to a 5-char code (e.g. "KM-XP") that can be typed back into `show`.

Key properties:
- DETERMINISTIC: Same hash always produces same code (xxhash)
- STATELESS: Decoding scans the snapshot's hashes, nothing is stored
- NOT UNIQUE: 26^4 codes, so large repositories will see collisions;
  decode_all() returns every match and callers treat >1 as ambiguous

Usage:
    codec = HashCodec()
    code = codec.encode("3b18e512dba79e4c8300dd08aeb37f8e728b8dad")
    matches = codec.decode_all(code, snapshot.hashes())
"""

import re
from typing import List

import xxhash


# AA-BB: two uppercase letters, dash, two uppercase letters
CODE_PATTERN = re.compile(r'^[A-Z]{2}-[A-Z]{2}$')

CODE_SPACE = 26 ** 4


class HashCodec:
    """Deterministic hash aliasing for object references."""

    def encode(self, hash: str) -> str:
        """
        Generate the alias code for a hash.

        Case-insensitive: the hash is lowercased before hashing.
        """
        if not hash:
            return hash
        return self._hash_to_code(hash.strip().lower())

    def decode_all(self, code: str, candidate_hashes: List[str]) -> List[str]:
        """Every candidate whose alias is code, in candidate order."""
        if not self.is_short_code(code):
            return []
        code_upper = code.strip().upper()
        return [h for h in candidate_hashes if self.encode(h) == code_upper]

    def is_short_code(self, value: str) -> bool:
        if not value:
            return False
        return bool(CODE_PATTERN.match(value.strip().upper()))

    def format_with_code(self, hash: str, display_text: str) -> str:
        """Format as "[AA-BB] display_text"."""
        return f"[{self.encode(hash)}] {display_text}"

    def _hash_to_code(self, normalized: str) -> str:
        """Map xxh32 of the hash into the 26^4 code space, base-26."""
        n = xxhash.xxh32(normalized.encode()).intdigest() % CODE_SPACE

        c0 = n % 26
        c1 = (n // 26) % 26
        c2 = (n // 676) % 26
        c3 = (n // 17576) % 26

        return f"{chr(65 + c3)}{chr(65 + c2)}-{chr(65 + c1)}{chr(65 + c0)}"
