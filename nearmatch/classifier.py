"""Find the known values nearest to an unknown string.

Known values are compared with an unknown string by their Levenshtein
distance. A smaller distance gives a higher confidence, from 0.0 for a
complete mismatch to 1.0 for an exact match. Offsets and extents of matches
are UTF-8 byte positions within the normalized unknown string.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass
from itertools import accumulate
from typing import Callable, Iterable, Optional

from nearmatch.diff import Diff, Operation, diff_levenshtein, diff_main
from nearmatch.pq import Queue
from nearmatch.searchset import (
    DEFAULT_GRANULARITY,
    MatchRange,
    SearchSet,
    find_potential_matches,
    ranges_size,
    target_range,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD = 0.80
"""Minimum ratio of matched source tokens for a range to be measured."""

_DEFAULT_MIN_DIFF_RATIO = 0.75

NormalizeFunc = Callable[[str], str]

_WHITESPACE_RUN = re.compile(r"[\t\n\f\r ]+")


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8", "surrogatepass"))


@dataclass(frozen=True)
class Match:
    """The result of matching an unknown string against a known value."""

    name: str = ""
    confidence: float = 0.0
    offset: int = 0
    extent: int = 0


@dataclass
class _KnownValue:
    key: str
    normalized_value: str
    pattern: re.Pattern
    search_set: Optional[SearchSet] = None


def _compile(value: str) -> re.Pattern:
    try:
        return re.compile(value)
    except re.error as exc:
        raise ValueError(f"cannot compile known value: {exc}") from exc


def _match_queue() -> Queue:
    return Queue(lambda x, y: x.confidence > y.confidence)


class Classifier:
    """Matches strings against a set of known values.

    Each normalizer is applied in order to a string before comparison.
    ``min_diff_ratio`` is the smallest ratio of the shorter to the longer
    length for a known value to be considered by ``nearest_match``.
    """

    def __init__(self, threshold: float, *normalizers: NormalizeFunc) -> None:
        self.threshold = threshold
        self.min_diff_ratio = _DEFAULT_MIN_DIFF_RATIO
        self._normalizers = tuple(normalizers)
        self._values: dict[str, _KnownValue] = {}
        self._lock = threading.Lock()

    def _normalize(self, text: str) -> str:
        for normalize in self._normalizers:
            text = normalize(text)
        return text

    def add_value(self, key: str, value: str) -> None:
        """Add a known value; raises ValueError if ``key`` is already used."""
        with self._lock:
            if key in self._values:
                raise ValueError(f"value already registered with key {key!r}")
            norm = self._normalize(value)
            self._values[key] = _KnownValue(key, norm, _compile(norm))

    def add_precomputed_value(self, key: str, value: str, search_set: SearchSet) -> None:
        """Add an already normalized value together with its search set."""
        with self._lock:
            if key in self._values:
                raise ValueError(f"value already registered with key {key!r}")
            search_set.generate_node_list()
            self._values[key] = _KnownValue(key, value, _compile(value), search_set)

    def nearest_match(self, text: str) -> Match:
        """Return the known value closest to the whole of ``text``.

        An empty ``Match`` comes back when nothing matches at all.
        """
        queue = self._nearest_match(text)
        return queue.pop() if queue else Match()

    def multiple_match(self, text: str) -> list[Match]:
        """Return the known values found within ``text``, best first."""
        queue = self._multiple_match(text)
        if queue is None:
            return []
        seen: set[Match] = set()
        matches: list[Match] = []
        while queue:
            match = queue.pop()
            if match not in seen:
                seen.add(match)
                matches.append(match)
        return uniquify(sort_matches(matches))

    def _known_values(self) -> list[_KnownValue]:
        with self._lock:
            return list(self._values.values())

    def _nearest_match(self, text: str) -> Queue:
        queue = _match_queue()
        unknown = self._normalize(text)
        if not unknown:
            return queue

        ulen = _byte_len(unknown)
        likely: list[tuple[float, _KnownValue]] = []
        for known in self._known_values():
            ratio = diff_ratio(unknown, known.normalized_value)
            if ratio < self.min_diff_ratio:
                continue
            if unknown == known.normalized_value:
                queue.push(Match(known.key, 1.0, 0, ulen))
                return queue
            likely.append((ratio, known))
        likely.sort(key=lambda pair: pair[0], reverse=True)

        for _, known in likely:
            diffs = diff_main(unknown, known.normalized_value, True)
            distance = diff_levenshtein(diffs)
            confidence = confidence_percentage(
                ulen, _byte_len(known.normalized_value), distance
            )
            if confidence > 0.0:
                queue.push(Match(known.key, confidence, 0, ulen))
        return queue

    def _multiple_match(self, text: str) -> Optional[Queue]:
        norm = self._normalize(text)
        if not norm:
            return None

        matcher = _Matcher(norm, self.threshold)
        for known in self._known_values():
            if known.search_set is None:
                search_set = SearchSet(known.normalized_value, DEFAULT_GRANULARITY)
                with self._lock:
                    known.search_set = search_set
            matcher.find_matches(known)
        return matcher.queue


class _Matcher:
    """Finds every potential occurrence of known values in one unknown text."""

    def __init__(self, unknown: str, threshold: float) -> None:
        self.unknown = SearchSet(unknown, DEFAULT_GRANULARITY)
        self.norm_unknown = unknown
        self.threshold = threshold
        self.queue = _match_queue()
        self._encoded = unknown.encode("utf-8", "surrogatepass")
        self._byte_offsets = [0, *accumulate(_byte_len(ch) for ch in unknown)]

    def find_matches(self, known: _KnownValue) -> None:
        spans = [
            (self._byte_offsets[m.start()], self._byte_offsets[m.end()])
            for m in known.pattern.finditer(self.norm_unknown)
        ]
        if spans:
            candidates = [[self._exact_range(start, end, known)] for start, end in spans]
        else:
            candidates = find_potential_matches(known.search_set, self.unknown)

        for ranges in candidates:
            if not self._within_threshold(known.search_set, ranges):
                continue
            start, end = target_range(ranges, self.unknown)
            section = self._encoded[start:end].decode("utf-8", "surrogatepass")
            confidence = lev_dist(section, known.normalized_value)
            if confidence > 0.0:
                self.queue.push(Match(known.key, confidence, start, end - start))

    def _exact_range(self, start: int, end: int, known: _KnownValue) -> MatchRange:
        start_index = end_index = 0
        for i, tok in enumerate(self.unknown.tokens):
            if tok.offset == start:
                start_index = i
            elif tok.offset >= end - _byte_len(tok.text):
                end_index = i
                break
        return MatchRange(0, len(known.search_set.tokens), start_index, end_index + 1)

    def _within_threshold(self, known: SearchSet, ranges: list[MatchRange]) -> bool:
        if not known.tokens:
            return False
        return ranges_size(ranges) / len(known.tokens) >= self.threshold


def sort_matches(matches: Iterable[Match]) -> list[Match]:
    """Order by descending confidence, then name, offset, and longest extent."""
    return sorted(matches, key=lambda m: (-m.confidence, m.name, m.offset, -m.extent))


def match_names(matches: Iterable[Match]) -> list[str]:
    """Return the names of the matches."""
    return [m.name for m in matches]


def uniquify(matches: Iterable[Match]) -> list[Match]:
    """Drop matches starting inside an earlier, better match.

    ``matches`` must already be sorted.
    """
    taken: list[tuple[int, int]] = []
    result: list[Match] = []
    for match in matches:
        if any(offset <= match.offset <= offset + extent for offset, extent in taken):
            continue
        taken.append((match.offset, match.extent))
        result.append(match)
    return result


def lev_dist(unknown: str, known: str) -> float:
    """Return the confidence that ``unknown`` is a rendering of ``known``."""
    if not known or not unknown:
        logger.info(
            "Zero-sized texts in Levenshtein Distance algorithm: known==%d, unknown==%d",
            _byte_len(known),
            _byte_len(unknown),
        )
        return 0.0

    diffs = diff_main(unknown, known, False)
    end = diff_range_end(known, diffs)
    distance = diff_levenshtein(diffs[:end])
    return confidence_percentage(
        unknown_text_length(unknown, diffs), _byte_len(known), distance
    )


def unknown_text_length(unknown: str, diffs: list[Diff]) -> int:
    """Return the byte length of the unknown text covered up to the last equality."""
    last = max(
        (i for i, d in enumerate(diffs) if d.operation == Operation.EQUAL), default=-1
    )
    return sum(
        _byte_len(d.text)
        for d in diffs[:last + 1]
        if d.operation in (Operation.EQUAL, Operation.DELETE)
    )


def diff_range_end(known: str, diffs: list[Diff]) -> int:
    """Return the index after the diffs that rebuild ``known``."""
    seen = ""
    for end, d in enumerate(diffs):
        if seen == known:
            return end
        if d.operation in (Operation.EQUAL, Operation.INSERT):
            seen += d.text
    return len(diffs)


def confidence_percentage(ulen: int, klen: int, distance: int) -> float:
    """Return 1.0 for an identical match down to 0.0 for a complete mismatch."""
    if ulen == 0 and klen == 0:
        return 1.0
    if ulen == 0 or klen == 0 or (distance > ulen and distance > klen):
        return 0.0
    return 1.0 - distance / max(ulen, klen)


def diff_ratio(s1: str, s2: str) -> float:
    """Return the shorter byte length as a fraction of the longer one."""
    x, y = _byte_len(s1), _byte_len(s2)
    if x == 0 and y == 0:
        return 1.0
    if x < y:
        return x / y
    return y / x


def flatten_whitespace(text: str) -> str:
    """Collapse each run of whitespace into a single space."""
    return _WHITESPACE_RUN.sub(" ", text)