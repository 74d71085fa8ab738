"""Split text into word and punctuation tokens and hash runs of tokens."""

from __future__ import annotations

import unicodedata
import zlib
from dataclasses import dataclass

_WHITESPACE = frozenset(
    "\t\n\v\f\r \x85\xa0"
    "\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000"
)


@dataclass
class Token:
    """A word or punctuation mark and its UTF-8 byte offset in the text."""

    text: str
    offset: int


@dataclass
class TokenRange:
    """A half-open range ``[start, end)`` of token indices."""

    start: int
    end: int

    def __str__(self) -> str:
        return f"[{self.start}, {self.end})"


class Hash(dict):
    """Maps a checksum to the token ranges whose text produced it."""

    def add(self, checksum: int, start: int, end: int) -> None:
        """Associate ``[start, end)`` with ``checksum`` unless already present."""
        new_range = TokenRange(start, end)
        ranges = self.setdefault(checksum, [])
        if new_range not in ranges:
            ranges.append(new_range)


def _is_space(ch: str) -> bool:
    return ch in _WHITESPACE


def _is_punct(ch: str) -> bool:
    return unicodedata.category(ch).startswith("P")


def _utf8_len(ch: str) -> int:
    code = ord(ch)
    if code < 0x80:
        return 1
    if code < 0x800:
        return 2
    if code < 0x10000:
        return 3
    return 4


def tokenize(text: str) -> list[Token]:
    """Split ``text`` into tokens; offsets are UTF-8 byte offsets."""
    tokens: list[Token] = []
    parts: list[str] = []
    start = -1
    offset = 0
    for ch in text:
        space = _is_space(ch)
        punct = not space and _is_punct(ch)
        if space or punct:
            if start >= 0:
                tokens.append(Token("".join(parts), start))
                parts = []
                start = -1
            if punct:
                tokens.append(Token(ch, offset))
        else:
            if start < 0:
                start = offset
            parts.append(ch)
        offset += _utf8_len(ch)
    if start >= 0:
        tokens.append(Token("".join(parts), start))
    return tokens


def generate_hashes(
    tokens: list[Token], hashes: Hash, size: int
) -> tuple[list[int], list[TokenRange]]:
    """Hash runs of ``size`` tokens, stepping by half a run.

    Each checksum is recorded in ``hashes``. Returns the checksums and their
    token ranges in the order generated.
    """
    checksums: list[int] = []
    ranges: list[TokenRange] = []
    if size == 0:
        return checksums, ranges

    step = size // 2
    offset = 0
    while offset + size <= len(tokens):
        joined = " ".join(tok.text for tok in tokens[offset:offset + size])
        checksum = zlib.crc32(joined.encode("utf-8", "surrogatepass"))
        checksums.append(checksum)
        ranges.append(TokenRange(offset, offset + size))
        hashes.add(checksum, offset, offset + size)
        if size <= 1:
            break
        offset += step
    return checksums, ranges


def combine_unique(
    ranges: list[TokenRange], other: list[TokenRange]
) -> list[TokenRange]:
    """Merge two range lists, ordered by start, without duplicates."""
    if not other:
        return ranges
    if not ranges:
        return other

    combined = sorted([*ranges, *other], key=lambda r: r.start)
    result = [combined[0]]
    for rng in combined[1:]:
        if rng != result[-1]:
            result.append(rng)
    return result