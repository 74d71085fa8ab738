"""Hash every run of tokens in a text so that likely matches are found quickly.

Matching maps ranges of a source (known) text onto a target (unknown) text
while keeping the source order. One source range may match several target
ranges; the algorithm untangles these so that every potential occurrence of
the source in the target comes back as its own list of in-order ranges.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import BinaryIO, Optional

from nearmatch.tokenizer import Hash, Token, TokenRange, generate_hashes, tokenize

DEFAULT_GRANULARITY = 3
"""The minimum size, in tokens, of the hashed chunks."""


@dataclass
class MatchRange:
    """A source token range matched to a target token range."""

    src_start: int
    src_end: int
    target_start: int
    target_end: int

    def __str__(self) -> str:
        return (
            f"[{self.src_start}, {self.src_end})->"
            f"[{self.target_start}, {self.target_end})"
        )


@dataclass
class _Node:
    checksum: int
    tokens: TokenRange

    def __str__(self) -> str:
        return f"[{self.tokens.start}:{self.tokens.end}]"


class SearchSet:
    """The tokens of a text with checksums of its runs of tokens."""

    def __init__(self, text: str, granularity: int = DEFAULT_GRANULARITY) -> None:
        self.tokens: list[Token] = tokenize(text)
        self.hashes: Hash = Hash()
        self.checksums, self.checksum_ranges = generate_hashes(
            self.tokens, self.hashes, min(len(self.tokens), granularity)
        )
        self._nodes: list[_Node] = []
        self.generate_node_list()

    def generate_node_list(self) -> None:
        """Build the list of (checksum, token range) nodes in checksum order."""
        if not self.tokens:
            self._nodes = []
            return
        self._nodes = [
            _Node(checksum, rng)
            for checksum, rng in zip(self.checksums, self.checksum_ranges)
        ]

    def node_strings(self) -> list[str]:
        """Describe each node as ``[start:end]``."""
        return [str(node) for node in self._nodes]

    def serialize(self, stream: BinaryIO) -> None:
        """Write this search set to a binary stream."""
        data = {
            "tokens": [[tok.text, tok.offset] for tok in self.tokens],
            "hashes": [
                [checksum, [[r.start, r.end] for r in ranges]]
                for checksum, ranges in self.hashes.items()
            ],
            "checksums": list(self.checksums),
            "checksum_ranges": [[r.start, r.end] for r in self.checksum_ranges],
        }
        stream.write(json.dumps(data).encode("utf-8"))

    @classmethod
    def deserialize(cls, stream: BinaryIO) -> SearchSet:
        """Read a search set written by ``serialize``."""
        try:
            data = json.loads(stream.read().decode("utf-8"))
            tokens = [Token(str(text), int(offset)) for text, offset in data["tokens"]]
            hashes = Hash()
            for checksum, ranges in data["hashes"]:
                hashes[int(checksum)] = [TokenRange(int(s), int(e)) for s, e in ranges]
            checksums = [int(c) for c in data["checksums"]]
            checksum_ranges = [
                TokenRange(int(s), int(e)) for s, e in data["checksum_ranges"]
            ]
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"malformed search set: {exc}") from exc

        sset = cls.__new__(cls)
        sset.tokens = tokens
        sset.hashes = hashes
        sset.checksums = checksums
        sset.checksum_ranges = checksum_ranges
        sset._nodes = []
        sset.generate_node_list()
        return sset


def target_range(ranges: list[MatchRange], target: SearchSet) -> tuple[int, int]:
    """Return the start and end byte offsets in the target text."""
    first = target.tokens[ranges[0].target_start]
    last = target.tokens[ranges[-1].target_end - 1]
    return first.offset, last.offset + len(last.text.encode("utf-8", "surrogatepass"))


def ranges_size(ranges: list[MatchRange]) -> int:
    """Return the number of source tokens matched."""
    return sum(r.src_end - r.src_start for r in ranges)


def find_potential_matches(src: SearchSet, target: SearchSet) -> list[list[MatchRange]]:
    """Return the target ranges that best match the source text."""
    matched = get_matched_ranges(src, target)
    return [coalesce_match_ranges(ranges) for ranges in matched]


def get_matched_ranges(src: SearchSet, target: SearchSet) -> list[list[MatchRange]]:
    """Find each separate occurrence of the source within the target."""
    matched = target_matched_ranges(src, target)
    if not matched:
        return []
    matched = sorted(matched, key=lambda r: (r.target_start, r.src_start))
    matched = untangle_source_ranges(matched)
    return merge_consecutive_ranges(split_ranges(matched))


def _extends_any(source_ranges: list[TokenRange], possible: list[list[MatchRange]]) -> bool:
    return any(
        tv.start >= mv[0].target_start and tv.start <= mv[-1].target_end
        for tv in source_ranges
        for mv in possible
    )


def target_matched_ranges(src: SearchSet, target: SearchSet) -> list[MatchRange]:
    """Find matching runs of source and target, ordered by target position."""
    if not src._nodes:
        return []

    matched: list[MatchRange] = []
    previous: Optional[_Node] = None
    # The growing candidate runs live in ``slots`` (whose length is its
    # capacity) with ``count`` of them in use. Growing beyond capacity moves
    # them to a new list, and ``extended`` remembers which list an entry was
    # recorded in, so entries recorded before a move keep seeing the old slot.
    slots: list[Optional[list[MatchRange]]] = []
    count = 0

    for node in target._nodes:
        source_ranges = src.hashes.get(node.checksum)
        found_hash = source_ranges is not None
        if (
            not found_hash
            or (previous is not None and node.tokens.start > previous.tokens.end)
            or not _extends_any(source_ranges, slots[:count])
        ):
            for run in slots[:count]:
                matched.extend(run)
            count = 0
            previous = None
        if not found_hash:
            continue

        extended: dict[int, tuple[list, int]] = {}
        tv = node.tokens
        for sv in source_ranges:
            new_range = MatchRange(sv.start, sv.end, tv.start, tv.end)
            found = False
            for i in range(count):
                run = slots[i]
                last = run[-1]
                if (
                    last.src_start <= sv.start <= last.src_end
                    and last.target_start <= tv.start <= last.target_end
                ):
                    found = True
                    slots[i] = run + [new_range]
                    extended[i] = (slots, i)
            if not found:
                if count == len(slots):
                    slots = slots + [None] * max(1, len(slots))
                slots[count] = [new_range]
                count += 1
                extended[count - 1] = (slots, count - 1)

        if len(extended) < count:
            i = 0
            while i < count:
                if i in extended:
                    i += 1
                    continue
                run = slots[i]
                inside_other = any(
                    run[0].src_start >= store[idx][0].src_start
                    and run[0].target_start >= store[idx][0].target_start
                    for store, idx in extended.values()
                )
                if not inside_other:
                    matched.extend(run)
                slots[i:count - 1] = slots[i + 1:count]
                count -= 1
        previous = node

    possible = slots[:count]
    i = 0
    while i < len(possible):
        first = possible[i]
        inside_later = False
        j = i + 1
        while j < len(possible):
            other = possible[j]
            if (
                first[0].src_start <= other[0].src_start
                and first[0].target_start <= other[0].target_start
            ):
                del possible[j]
                continue
            if (
                first[0].src_start >= other[0].src_start
                and first[0].target_start >= other[0].target_start
            ):
                inside_later = True
            j += 1
        if not inside_later:
            matched.extend(first)
        i += 1
    return matched


def _equal_target_range(this: MatchRange, that: MatchRange) -> bool:
    return this.target_start == that.target_start and this.target_end == that.target_end


def untangle_source_ranges(matched: list[MatchRange]) -> list[MatchRange]:
    """Drop ranges whose source range is out of order with its neighbours."""
    result = [matched[0]]
    i = 1
    while i < len(matched):
        current = matched[i]
        last = result[-1]
        if _equal_target_range(last, current):
            i += 1
            continue

        if i + 1 < len(matched) and _equal_target_range(current, matched[i + 1]):
            if current.src_start > last.src_start:
                result.append(current)
                i += 1
                continue
            replacement = None
            j = i + 1
            while j < len(matched) and _equal_target_range(current, matched[j]):
                if matched[j].src_start > last.src_start:
                    replacement = j
                    break
                j += 1
            if replacement is not None:
                result.append(matched[replacement])
                i = replacement + 1
                continue

        result.append(current)
        i += 1
    return result


def split_ranges(matched: list[MatchRange]) -> list[list[MatchRange]]:
    """Split into runs whose source ranges increase monotonically."""
    runs: list[list[MatchRange]] = []
    run = [matched[0]]
    for rng in matched[1:]:
        if run[-1].src_start > rng.src_start:
            runs.append(run)
            run = [rng]
        else:
            run.append(rng)
    runs.append(run)
    return runs


def merge_consecutive_ranges(matched: list[list[MatchRange]]) -> list[list[MatchRange]]:
    """Merge runs whose target ranges overlap the end of the previous run."""
    merged = [matched[0]]
    for current in matched[1:]:
        prev_last = merged[-1][-1]
        if prev_last.target_end > current[0].target_start:
            if prev_last.target_start < current[0].target_start:
                if prev_last.target_end < current[0].target_end:
                    prev_last.src_end += current[0].target_end - prev_last.target_end
                    prev_last.target_end = current[0].target_end
                merged[-1] = merged[-1] + current[1:]
                continue

            if _splice_overlap(merged, current):
                continue
        merged.append(current)
    return merged


def _splice_overlap(merged: list[list[MatchRange]], current: list[MatchRange]) -> bool:
    prev = merged[-1]
    for j in range(1, len(current)):
        for k in range(len(prev) - 1, 0, -1):
            if (
                prev[k].src_start < current[j].src_start
                and prev[k].target_start < current[j].target_start
            ):
                if prev[k].target_end < current[j].target_start:
                    prev[k].src_end += current[j - 1].target_end - prev[k].target_end
                    prev[k].target_end = current[j - 1].target_end
                merged[-1] = prev[:k + 1] + current[j:]
                return True
    return False


def coalesce_match_ranges(ranges: list[MatchRange]) -> list[MatchRange]:
    """Coalesce overlapping match ranges into contiguous ones."""
    coalesced = [ranges[0]]
    for rng in ranges[1:]:
        last = coalesced[-1]
        if last.src_start <= rng.src_start <= last.src_end:
            coalesced[-1] = MatchRange(
                last.src_start,
                max(rng.src_end, last.src_end),
                min(rng.target_start, last.target_start),
                max(rng.target_end, last.target_end),
            )
        else:
            coalesced.append(rng)
    return coalesced