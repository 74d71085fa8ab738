"""Compute the differences between two texts and their edit distance.

Differences are found with Myers' bisection, sped up by trimming common
affixes, spotting texts contained in one another, splitting around a long
common middle, and diffing line by line first when both texts are long.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import IntEnum


class Operation(IntEnum):
    """The kind of edit a ``Diff`` stands for."""

    DELETE = -1
    EQUAL = 0
    INSERT = 1


@dataclass(frozen=True)
class Diff:
    """One run of text that is deleted, inserted or left unchanged."""

    operation: Operation
    text: str


_BLANK_LINE_END = re.compile(r"\n\r?\n\Z")
_BLANK_LINE_START = re.compile(r"\A\r?\n\r?\n")


def _common_prefix(a: str, b: str) -> int:
    n = min(len(a), len(b))
    for i in range(n):
        if a[i] != b[i]:
            return i
    return n


def _common_suffix(a: str, b: str) -> int:
    n = min(len(a), len(b))
    for i in range(1, n + 1):
        if a[-i] != b[-i]:
            return i - 1
    return n


def _common_overlap(text1: str, text2: str) -> int:
    len1, len2 = len(text1), len(text2)
    if not len1 or not len2:
        return 0
    if len1 > len2:
        text1 = text1[-len2:]
    elif len1 < len2:
        text2 = text2[:len1]
    shortest = min(len1, len2)
    if text1 == text2:
        return shortest
    best = 0
    length = 1
    while True:
        found = text2.find(text1[-length:])
        if found == -1:
            return best
        length += found
        if found == 0 or text1[-length:] == text2[:length]:
            best = length
            length += 1


def diff_main(text1: str, text2: str, checklines: bool = True) -> list[Diff]:
    """Return the differences that turn ``text1`` into ``text2``.

    With ``checklines`` set, long texts are first compared line by line.
    """
    if text1 == text2:
        return [Diff(Operation.EQUAL, text1)] if text1 else []

    n = _common_prefix(text1, text2)
    prefix = text1[:n]
    text1, text2 = text1[n:], text2[n:]
    n = _common_suffix(text1, text2)
    suffix = text1[len(text1) - n:] if n else ""
    if n:
        text1, text2 = text1[:-n], text2[:-n]

    diffs = _compute(text1, text2, checklines)
    if prefix:
        diffs.insert(0, Diff(Operation.EQUAL, prefix))
    if suffix:
        diffs.append(Diff(Operation.EQUAL, suffix))
    _cleanup_merge(diffs)
    return diffs


def _compute(text1: str, text2: str, checklines: bool) -> list[Diff]:
    if not text1:
        return [Diff(Operation.INSERT, text2)]
    if not text2:
        return [Diff(Operation.DELETE, text1)]

    longtext, shorttext = (text1, text2) if len(text1) > len(text2) else (text2, text1)
    i = longtext.find(shorttext)
    if i != -1:
        op = Operation.DELETE if len(text1) > len(text2) else Operation.INSERT
        return [
            Diff(op, longtext[:i]),
            Diff(Operation.EQUAL, shorttext),
            Diff(op, longtext[i + len(shorttext):]),
        ]
    if len(shorttext) == 1:
        return [Diff(Operation.DELETE, text1), Diff(Operation.INSERT, text2)]

    half = _half_match(text1, text2)
    if half is not None:
        a1, b1, a2, b2, middle = half
        return (
            diff_main(a1, a2, checklines)
            + [Diff(Operation.EQUAL, middle)]
            + diff_main(b1, b2, checklines)
        )

    if checklines and len(text1) > 100 and len(text2) > 100:
        return _line_mode(text1, text2)
    return _bisect(text1, text2)


def _half_match_at(longtext: str, shorttext: str, i: int):
    seed = longtext[i:i + len(longtext) // 4]
    best = ""
    best_parts = ("", "", "", "")
    j = shorttext.find(seed)
    while j != -1:
        prefix_len = _common_prefix(longtext[i:], shorttext[j:])
        suffix_len = _common_suffix(longtext[:i], shorttext[:j])
        if len(best) < suffix_len + prefix_len:
            best = shorttext[j - suffix_len:j] + shorttext[j:j + prefix_len]
            best_parts = (
                longtext[:i - suffix_len],
                longtext[i + prefix_len:],
                shorttext[:j - suffix_len],
                shorttext[j + prefix_len:],
            )
        j = shorttext.find(seed, j + 1)
    if len(best) * 2 >= len(longtext):
        return (*best_parts, best)
    return None


def _half_match(text1: str, text2: str):
    longtext, shorttext = (text1, text2) if len(text1) > len(text2) else (text2, text1)
    if len(longtext) < 4 or len(shorttext) * 2 < len(longtext):
        return None
    hm1 = _half_match_at(longtext, shorttext, (len(longtext) + 3) // 4)
    hm2 = _half_match_at(longtext, shorttext, (len(longtext) + 1) // 2)
    if hm1 is None and hm2 is None:
        return None
    if hm2 is None:
        hm = hm1
    elif hm1 is None:
        hm = hm2
    else:
        hm = hm1 if len(hm1[4]) > len(hm2[4]) else hm2
    if len(text1) > len(text2):
        return hm
    long_a, long_b, short_a, short_b, middle = hm
    return short_a, short_b, long_a, long_b, middle


def _lines_to_chars(text1: str, text2: str):
    lines = [""]
    index: dict[str, int] = {}

    def munge(text: str) -> str:
        chars = []
        start = 0
        end = -1
        while end < len(text) - 1:
            end = text.find("\n", start)
            if end == -1:
                end = len(text) - 1
            line = text[start:end + 1]
            if line not in index:
                lines.append(line)
                code = len(lines) - 1
                if code >= 0xD800:
                    code += 0x800
                index[line] = code
            chars.append(chr(index[line]))
            start = end + 1
        return "".join(chars)

    encoded1 = munge(text1)
    encoded2 = munge(text2)
    decode = {chr(code): line for line, code in index.items()}
    return encoded1, encoded2, decode


def _line_mode(text1: str, text2: str) -> list[Diff]:
    encoded1, encoded2, decode = _lines_to_chars(text1, text2)
    diffs = [
        Diff(d.operation, "".join(decode[c] for c in d.text))
        for d in diff_main(encoded1, encoded2, False)
    ]
    _cleanup_semantic(diffs)

    diffs.append(Diff(Operation.EQUAL, ""))
    pointer = 0
    count_delete = count_insert = 0
    text_delete = text_insert = ""
    while pointer < len(diffs):
        d = diffs[pointer]
        if d.operation == Operation.INSERT:
            count_insert += 1
            text_insert += d.text
        elif d.operation == Operation.DELETE:
            count_delete += 1
            text_delete += d.text
        else:
            if count_delete >= 1 and count_insert >= 1:
                sub = diff_main(text_delete, text_insert, False)
                first = pointer - count_delete - count_insert
                diffs[first:pointer] = sub
                pointer = first + len(sub)
            count_delete = count_insert = 0
            text_delete = text_insert = ""
        pointer += 1
    diffs.pop()
    return diffs


def _bisect(text1: str, text2: str) -> list[Diff]:
    len1, len2 = len(text1), len(text2)
    max_d = (len1 + len2 + 1) // 2
    v_offset = max_d
    v_length = 2 * max_d
    v1 = [-1] * v_length
    v2 = [-1] * v_length
    v1[v_offset + 1] = 0
    v2[v_offset + 1] = 0
    delta = len1 - len2
    front = delta % 2 != 0
    k1start = k1end = k2start = k2end = 0
    for d in range(max_d):
        for k1 in range(-d + k1start, d + 1 - k1end, 2):
            k1_offset = v_offset + k1
            if k1 == -d or (k1 != d and v1[k1_offset - 1] < v1[k1_offset + 1]):
                x1 = v1[k1_offset + 1]
            else:
                x1 = v1[k1_offset - 1] + 1
            y1 = x1 - k1
            while x1 < len1 and y1 < len2 and text1[x1] == text2[y1]:
                x1 += 1
                y1 += 1
            v1[k1_offset] = x1
            if x1 > len1:
                k1end += 2
            elif y1 > len2:
                k1start += 2
            elif front:
                k2_offset = v_offset + delta - k1
                if 0 <= k2_offset < v_length and v2[k2_offset] != -1:
                    if x1 >= len1 - v2[k2_offset]:
                        return _bisect_split(text1, text2, x1, y1)
        for k2 in range(-d + k2start, d + 1 - k2end, 2):
            k2_offset = v_offset + k2
            if k2 == -d or (k2 != d and v2[k2_offset - 1] < v2[k2_offset + 1]):
                x2 = v2[k2_offset + 1]
            else:
                x2 = v2[k2_offset - 1] + 1
            y2 = x2 - k2
            while x2 < len1 and y2 < len2 and text1[-x2 - 1] == text2[-y2 - 1]:
                x2 += 1
                y2 += 1
            v2[k2_offset] = x2
            if x2 > len1:
                k2end += 2
            elif y2 > len2:
                k2start += 2
            elif not front:
                k1_offset = v_offset + delta - k2
                if 0 <= k1_offset < v_length and v1[k1_offset] != -1:
                    x1 = v1[k1_offset]
                    y1 = v_offset + x1 - k1_offset
                    if x1 >= len1 - x2:
                        return _bisect_split(text1, text2, x1, y1)
    return [Diff(Operation.DELETE, text1), Diff(Operation.INSERT, text2)]


def _bisect_split(text1: str, text2: str, x: int, y: int) -> list[Diff]:
    return diff_main(text1[:x], text2[:y], False) + diff_main(text1[x:], text2[y:], False)


def _cleanup_merge(diffs: list[Diff]) -> None:
    diffs.append(Diff(Operation.EQUAL, ""))
    pointer = 0
    count_delete = count_insert = 0
    text_delete = text_insert = ""
    while pointer < len(diffs):
        d = diffs[pointer]
        if d.operation == Operation.INSERT:
            count_insert += 1
            text_insert += d.text
            pointer += 1
        elif d.operation == Operation.DELETE:
            count_delete += 1
            text_delete += d.text
            pointer += 1
        else:
            if count_delete + count_insert > 1:
                if count_delete and count_insert:
                    n = _common_prefix(text_insert, text_delete)
                    if n:
                        x = pointer - count_delete - count_insert - 1
                        if x >= 0 and diffs[x].operation == Operation.EQUAL:
                            diffs[x] = Diff(Operation.EQUAL, diffs[x].text + text_insert[:n])
                        else:
                            diffs.insert(0, Diff(Operation.EQUAL, text_insert[:n]))
                            pointer += 1
                        text_insert = text_insert[n:]
                        text_delete = text_delete[n:]
                    n = _common_suffix(text_insert, text_delete)
                    if n:
                        diffs[pointer] = Diff(
                            Operation.EQUAL, text_insert[-n:] + diffs[pointer].text
                        )
                        text_insert = text_insert[:-n]
                        text_delete = text_delete[:-n]
                new_ops = []
                if text_delete:
                    new_ops.append(Diff(Operation.DELETE, text_delete))
                if text_insert:
                    new_ops.append(Diff(Operation.INSERT, text_insert))
                pointer -= count_delete + count_insert
                diffs[pointer:pointer + count_delete + count_insert] = new_ops
                pointer += len(new_ops) + 1
            elif pointer != 0 and diffs[pointer - 1].operation == Operation.EQUAL:
                diffs[pointer - 1] = Diff(Operation.EQUAL, diffs[pointer - 1].text + d.text)
                del diffs[pointer]
            else:
                pointer += 1
            count_delete = count_insert = 0
            text_delete = text_insert = ""
    if diffs and diffs[-1].text == "":
        diffs.pop()

    changes = False
    pointer = 1
    while pointer < len(diffs) - 1:
        prev, cur, nxt = diffs[pointer - 1], diffs[pointer], diffs[pointer + 1]
        if prev.operation == Operation.EQUAL and nxt.operation == Operation.EQUAL:
            if prev.text and cur.text.endswith(prev.text):
                diffs[pointer] = Diff(cur.operation, prev.text + cur.text[:-len(prev.text)])
                diffs[pointer + 1] = Diff(Operation.EQUAL, prev.text + nxt.text)
                del diffs[pointer - 1]
                changes = True
            elif nxt.text and cur.text.startswith(nxt.text):
                diffs[pointer - 1] = Diff(Operation.EQUAL, prev.text + nxt.text)
                diffs[pointer] = Diff(cur.operation, cur.text[len(nxt.text):] + nxt.text)
                del diffs[pointer + 1]
                changes = True
        pointer += 1
    if changes:
        _cleanup_merge(diffs)


def _cleanup_semantic(diffs: list[Diff]) -> None:
    changes = False
    equalities: list[int] = []
    last_equality = None
    pointer = 0
    ins1 = del1 = ins2 = del2 = 0
    while pointer < len(diffs):
        d = diffs[pointer]
        if d.operation == Operation.EQUAL:
            equalities.append(pointer)
            ins1, del1 = ins2, del2
            ins2 = del2 = 0
            last_equality = d.text
        else:
            if d.operation == Operation.INSERT:
                ins2 += len(d.text)
            else:
                del2 += len(d.text)
            if (
                last_equality
                and len(last_equality) <= max(ins1, del1)
                and len(last_equality) <= max(ins2, del2)
            ):
                at = equalities[-1]
                diffs.insert(at, Diff(Operation.DELETE, last_equality))
                diffs[at + 1] = Diff(Operation.INSERT, diffs[at + 1].text)
                equalities.pop()
                if equalities:
                    equalities.pop()
                pointer = equalities[-1] if equalities else -1
                ins1 = del1 = ins2 = del2 = 0
                last_equality = None
                changes = True
        pointer += 1

    if changes:
        _cleanup_merge(diffs)
    _cleanup_semantic_lossless(diffs)

    pointer = 1
    while pointer < len(diffs):
        prev, cur = diffs[pointer - 1], diffs[pointer]
        if prev.operation == Operation.DELETE and cur.operation == Operation.INSERT:
            deletion, insertion = prev.text, cur.text
            o1 = _common_overlap(deletion, insertion)
            o2 = _common_overlap(insertion, deletion)
            if o1 >= o2:
                if o1 >= len(deletion) / 2 or o1 >= len(insertion) / 2:
                    diffs.insert(pointer, Diff(Operation.EQUAL, insertion[:o1]))
                    diffs[pointer - 1] = Diff(Operation.DELETE, deletion[:len(deletion) - o1])
                    diffs[pointer + 1] = Diff(Operation.INSERT, insertion[o1:])
                    pointer += 1
            elif o2 >= len(deletion) / 2 or o2 >= len(insertion) / 2:
                diffs.insert(pointer, Diff(Operation.EQUAL, deletion[:o2]))
                diffs[pointer - 1] = Diff(Operation.INSERT, insertion[:len(insertion) - o2])
                diffs[pointer + 1] = Diff(Operation.DELETE, deletion[o2:])
                pointer += 1
            pointer += 1
        pointer += 1


def _boundary_score(one: str, two: str) -> int:
    if not one or not two:
        return 6
    c1, c2 = one[-1], two[0]
    non_alnum1 = not c1.isalnum()
    non_alnum2 = not c2.isalnum()
    ws1 = non_alnum1 and c1.isspace()
    ws2 = non_alnum2 and c2.isspace()
    lb1 = ws1 and c1 in "\r\n"
    lb2 = ws2 and c2 in "\r\n"
    blank1 = lb1 and _BLANK_LINE_END.search(one) is not None
    blank2 = lb2 and _BLANK_LINE_START.search(two) is not None
    if blank1 or blank2:
        return 5
    if lb1 or lb2:
        return 4
    if non_alnum1 and not ws1 and ws2:
        return 3
    if ws1 or ws2:
        return 2
    if non_alnum1 or non_alnum2:
        return 1
    return 0


def _cleanup_semantic_lossless(diffs: list[Diff]) -> None:
    pointer = 1
    while pointer < len(diffs) - 1:
        prev, cur, nxt = diffs[pointer - 1], diffs[pointer], diffs[pointer + 1]
        if prev.operation == Operation.EQUAL and nxt.operation == Operation.EQUAL:
            eq1, edit, eq2 = prev.text, cur.text, nxt.text
            n = _common_suffix(eq1, edit)
            if n:
                common = edit[-n:]
                eq1 = eq1[:-n]
                edit = common + edit[:-n]
                eq2 = common + eq2
            best1, best_edit, best2 = eq1, edit, eq2
            best_score = _boundary_score(eq1, edit) + _boundary_score(edit, eq2)
            while edit and eq2 and edit[0] == eq2[0]:
                eq1 += edit[0]
                edit = edit[1:] + eq2[0]
                eq2 = eq2[1:]
                score = _boundary_score(eq1, edit) + _boundary_score(edit, eq2)
                if score >= best_score:
                    best_score = score
                    best1, best_edit, best2 = eq1, edit, eq2
            if prev.text != best1:
                if best1:
                    diffs[pointer - 1] = Diff(Operation.EQUAL, best1)
                else:
                    del diffs[pointer - 1]
                    pointer -= 1
                diffs[pointer] = Diff(cur.operation, best_edit)
                if best2:
                    diffs[pointer + 1] = Diff(Operation.EQUAL, best2)
                else:
                    del diffs[pointer + 1]
                    pointer -= 1
        pointer += 1


def diff_levenshtein(diffs: list[Diff]) -> int:
    """Return the number of inserted, deleted or substituted characters."""
    distance = inserted = deleted = 0
    for d in diffs:
        if d.operation == Operation.INSERT:
            inserted += len(d.text)
        elif d.operation == Operation.DELETE:
            deleted += len(d.text)
        else:
            distance += max(inserted, deleted)
            inserted = deleted = 0
    return distance + max(inserted, deleted)