import re
import string

import pytest

from nearmatch.classifier import (
    DEFAULT_CONFIDENCE_THRESHOLD,
    Classifier,
    Match,
    confidence_percentage,
    diff_range_end,
    diff_ratio,
    flatten_whitespace,
    lev_dist,
    match_names,
    sort_matches,
    uniquify,
    unknown_text_length,
)
from nearmatch.diff import Diff, Operation, diff_main
from nearmatch.searchset import SearchSet

GETTYSBURG = """Four score and seven years ago our fathers brought forth
on this continent, a new nation, conceived in Liberty, and dedicated to the
proposition that all men are created equal."""

MODIFIED_GETTYSBURG = """Four score and seven years ago our fathers brought forth
on this continent, a nation that was new and improved, conceived in Liberty, and
dedicated to the proposition that all men are created equal."""

GETTYSBURG_EXTRA_WORD = """Four score and seven years ago our fathers brought forth
on this continent, a new nation, conceived in Liberty, and dedicated to the
proposition that all men are created equal.Foobar"""

DECLARATION = """When in the Course of human events, it becomes necessary
for one people to dissolve the political bands which have connected them with
another, and to assume among the powers of the earth, the separate and equal
station to which the Laws of Nature and of Nature's God entitle them, a decent
respect to the opinions of mankind requires that they should declare the causes
which impel them to the separation."""

LOREMIPSUM = """Lorem ipsum dolor sit amet, consectetur adipiscing elit. Nulla
varius enim mattis, rhoncus lectus id, aliquet sem. Phasellus eget ex in dolor
feugiat ultricies. Etiam interdum sit amet nisl in placerat.  Sed vitae enim
vulputate, tempus leo commodo, accumsan nulla."""

MODIFIED_LOREM = """Lorem ipsum dolor amet, consectetur adipiscing elit. Nulla
varius enim mattis, lectus id, aliquet rhoncus  sem. Phasellus eget ex in dolor
feugiat ultricies. Etiam interdum sit amet sit  nisl in placerat.  Sed vitae enim
vulputate, tempus leo commodo, accumsan nulla."""

LESS_MODIFIED_LOREM = """Lorem ipsum dolor sit amet, consectetur adipiscing elit. Nulla
varius enim mattis, rhoncus lectus id, aliquet. Phasellus eget ex in dolor
feugiat ultricies. Etiam interdum sit amet nisl in placerat.  Sed vitae enim
vulputate, tempus leo commodo, accumsan nulla."""

HUMOUR_OF_IRELAND = """As a rule, Irish poets have not extracted a pessimistic
philosophy from liquor; they are “elevated,” not depressed, and do not deem
it essential to the production of a poem that its author should be a cynic or
an evil prophet. One of the best attributes of Irish poetry is its constant
expression of the natural emotions. Previous to the close of the
seventeenth[xvi] century, it is said, drunkenness was not suggested by the
poets as common in Ireland—the popularity of Bacchanalian songs since that
date seems to prove that the vice soon became a virtue. Maginn is the
noisiest of modern revellers, and easily roars the others down.
"""

FELLOW_IN_THE_GOAT_SKIN = """There was a poor widow living down there near the Iron
Forge when the country was all covered with forests, and you might walk on
the tops of trees from Carnew to the Lady’s Island, and she had one boy. She
was very poor, as I said before, and was not able to buy clothes for her son.
So when she was going out she fixed him snug and combustible in the ash-pit,
and piled the warm ashes about him. The boy knew no better, and was as happy
as the day was long; and he was happier still when a neighbour[10] gave his
mother a kid to keep him company when herself was abroad. The kid and the lad
played like two may-boys; and when she was old enough to give milk, wasn’t it
a godsend to the little family? You won’t prevent the boy from growing up
into a young man, but not a screed of clothes had he then no more than when
he was a gorsoon.
"""

OLD_CROW_YOUNG_CROW = """There was an old crow teaching a young crow one day, and
he said to him, “Now, my son,” says he, “listen to the advice I’m going to
give you. If you see a person coming near you and stooping, mind yourself,
and be on your keeping; he’s stooping for a stone to throw at you.”

“But tell me,” says the young crow, “what should I do if he had a stone
already down in his pocket?”

“Musha, go ’long out of that,” says the old crow, “you’ve learned enough; the
devil another learning I’m able to give you.”
"""

NULLIFIABLE = """[[ , _ , _ , _
? _ : _
? _ : _
? _ : _
]
}
"""

_NON_WORDS = re.compile("[" + re.escape(string.punctuation) + "]+")


def remove_non_words(text):
    return _NON_WORDS.sub("", text)


@pytest.fixture(scope="module")
def classifiers():
    c = Classifier(DEFAULT_CONFIDENCE_THRESHOLD, flatten_whitespace)
    c.add_value("gettysburg", GETTYSBURG)
    c.add_value("declaration", DECLARATION)
    half = len(DECLARATION) // 2
    c.add_value("declaration-close", DECLARATION[:half - 1] + "_" + DECLARATION[half:])
    c.add_value("loremipsum", LOREMIPSUM)

    normalizing = Classifier(
        DEFAULT_CONFIDENCE_THRESHOLD, flatten_whitespace, remove_non_words
    )
    normalizing.add_value("gettysburg", GETTYSBURG)
    return {"c": c, "normalize": normalizing}


@pytest.fixture(scope="module")
def nearest_classifier():
    c = Classifier(DEFAULT_CONFIDENCE_THRESHOLD, flatten_whitespace)
    c.add_value("gettysburg", GETTYSBURG)
    c.add_value("declaration", DECLARATION)
    c.add_value("loremipsum", LOREMIPSUM)
    return c


@pytest.mark.parametrize(
    "text, name, min_conf, max_conf",
    [
        (DECLARATION, "declaration", 1.0, 1.0),
        (MODIFIED_LOREM, "loremipsum", 0.90, 0.91),
        (MODIFIED_GETTYSBURG, "gettysburg", 0.86, 0.87),
    ],
    ids=["full declaration", "modified lorem", "modified gettysburg"],
)
def test_nearest_match(nearest_classifier, text, name, min_conf, max_conf):
    m = nearest_classifier.nearest_match(text)
    assert m.name == name
    assert min_conf <= m.confidence <= max_conf


def test_nearest_match_of_empty_text_is_empty_match(nearest_classifier):
    assert nearest_classifier.nearest_match("") == Match()


@pytest.mark.parametrize(
    "which, text, want",
    [
        (
            "c",
            FELLOW_IN_THE_GOAT_SKIN + DECLARATION + HUMOUR_OF_IRELAND,
            [("declaration", 845, 1.0, 1.0)],
        ),
        (
            "c",
            FELLOW_IN_THE_GOAT_SKIN + MODIFIED_LOREM + HUMOUR_OF_IRELAND,
            [("loremipsum", 845, 0.90, 0.91)],
        ),
        (
            "c",
            FELLOW_IN_THE_GOAT_SKIN + MODIFIED_LOREM + HUMOUR_OF_IRELAND
            + MODIFIED_GETTYSBURG + OLD_CROW_YOUNG_CROW,
            [("loremipsum", 845, 0.90, 0.91), ("gettysburg", 1750, 0.86, 0.87)],
        ),
        (
            "c",
            FELLOW_IN_THE_GOAT_SKIN + MODIFIED_LOREM + HUMOUR_OF_IRELAND
            + LESS_MODIFIED_LOREM + OLD_CROW_YOUNG_CROW,
            [("loremipsum", 1750, 0.98, 0.99), ("loremipsum", 845, 0.90, 0.91)],
        ),
        ("c", NULLIFIABLE, []),
        ("c", FELLOW_IN_THE_GOAT_SKIN + HUMOUR_OF_IRELAND, []),
        (
            "normalize",
            FELLOW_IN_THE_GOAT_SKIN + GETTYSBURG_EXTRA_WORD + HUMOUR_OF_IRELAND,
            [("gettysburg", 825, 1.0, 1.0)],
        ),
    ],
    ids=[
        "exact text match",
        "partial text match",
        "two partial matches",
        "partial matches of similar text",
        "nullifiable text",
        "no match",
        "exact match with extra word and non-word normalizer",
    ],
)
def test_multiple_match(classifiers, which, text, want):
    matches = classifiers[which].multiple_match(text)
    assert len(matches) == len(want)
    for m, (key, offset, min_conf, max_conf) in zip(matches, want):
        assert m.name == key
        assert min_conf <= m.confidence <= max_conf
        assert m.offset == offset


def test_multiple_match_of_empty_text(classifiers):
    assert classifiers["c"].multiple_match("   ") == []


def test_add_value_rejects_duplicate_key():
    c = Classifier(DEFAULT_CONFIDENCE_THRESHOLD, flatten_whitespace)
    c.add_value("gettysburg", GETTYSBURG)
    with pytest.raises(ValueError):
        c.add_value("gettysburg", DECLARATION)


def test_add_precomputed_value_finds_exact_match():
    c = Classifier(DEFAULT_CONFIDENCE_THRESHOLD, flatten_whitespace)
    norm = flatten_whitespace(GETTYSBURG)
    c.add_precomputed_value("gettysburg", norm, SearchSet(norm, 3))
    with pytest.raises(ValueError):
        c.add_precomputed_value("gettysburg", norm, SearchSet(norm, 3))
    matches = c.multiple_match("prefix words here " + GETTYSBURG)
    assert match_names(matches) == ["gettysburg"]
    assert matches[0].confidence == 1.0
    assert matches[0].offset == len("prefix words here ")


@pytest.mark.parametrize(
    "x, y, want",
    [
        ("", "", 1.0),
        ("a", "b", 1.0),
        ("", "abc", 0.0),
        ("ab", "c", 0.5),
        ("a", "bc", 0.5),
        ("a", "bcde", 0.25),
    ],
)
def test_diff_ratio(x, y, want):
    assert diff_ratio(x, y) == want


def _m(name, confidence, offset):
    return Match(name=name, confidence=confidence, offset=offset)


@pytest.mark.parametrize(
    "matches, want",
    [
        (
            [_m("b", 0.42, 0), _m("a", 0.42, 0)],
            [_m("a", 0.42, 0), _m("b", 0.42, 0)],
        ),
        (
            [_m("b", 0.42, 0), _m("b", 0.90, 0)],
            [_m("b", 0.90, 0), _m("b", 0.42, 0)],
        ),
        (
            [_m("b", 0.42, 42), _m("b", 0.42, 0)],
            [_m("b", 0.42, 0), _m("b", 0.42, 42)],
        ),
        (
            [_m("b", 0.42, 0), _m("a", 0.90, 0)],
            [_m("a", 0.90, 0), _m("b", 0.42, 0)],
        ),
        (
            [_m("b", 0.42, 37), _m("a", 0.42, 0)],
            [_m("a", 0.42, 0), _m("b", 0.42, 37)],
        ),
        (
            [_m("a", 0.42, 0), _m("b", 0.90, 37)],
            [_m("b", 0.90, 37), _m("a", 0.42, 0)],
        ),
    ],
    ids=[
        "different names, same confidences, same offset",
        "same names, different confidences, same offset",
        "same names, same confidences, different offsets",
        "different names, different confidences, same offset",
        "different names, same confidences, different offset",
        "different names, different confidences, different offset",
    ],
)
def test_sort_matches(matches, want):
    assert sort_matches(matches) == want


def test_sort_matches_prefers_longer_extent_at_same_offset():
    short = Match("a", 0.5, 3, 4)
    long = Match("a", 0.5, 3, 10)
    assert sort_matches([short, long]) == [long, short]


@pytest.mark.parametrize(
    "unknown, known, end",
    [
        (DECLARATION, DECLARATION, 1),
        (LESS_MODIFIED_LOREM, LOREMIPSUM, 3),
        (MODIFIED_GETTYSBURG, GETTYSBURG, 19),
    ],
    ids=["identical", "lorem", "gettysburg"],
)
def test_diff_range_end(unknown, known, end):
    diffs = diff_main(unknown, known, True)
    assert diff_range_end(known, diffs) == end


def test_diff_range_end_stops_after_known_is_built():
    diffs = [
        Diff(Operation.EQUAL, "ab"),
        Diff(Operation.INSERT, "c"),
        Diff(Operation.DELETE, "x"),
    ]
    assert diff_range_end("abc", diffs) == 2
    assert diff_range_end("abc", []) == 0


def test_unknown_text_length_stops_at_last_equality():
    diffs = [
        Diff(Operation.EQUAL, "ab"),
        Diff(Operation.DELETE, "cd"),
        Diff(Operation.INSERT, "ef"),
        Diff(Operation.EQUAL, "g"),
        Diff(Operation.DELETE, "h"),
    ]
    assert unknown_text_length("abcdgh", diffs) == 5
    assert unknown_text_length("h", [Diff(Operation.DELETE, "h")]) == 0


def test_confidence_percentage_edges():
    assert confidence_percentage(0, 0, 0) == 1.0
    assert confidence_percentage(0, 5, 1) == 0.0
    assert confidence_percentage(5, 0, 1) == 0.0
    assert confidence_percentage(3, 4, 5) == 0.0
    assert confidence_percentage(10, 10, 0) == 1.0


def test_lev_dist_identical_and_empty():
    assert lev_dist(GETTYSBURG, GETTYSBURG) == 1.0
    assert lev_dist("", GETTYSBURG) == 0.0
    assert lev_dist(GETTYSBURG, "") == 0.0


def test_uniquify_drops_contained_matches():
    best = Match("a", 0.9, 10, 20)
    inside = Match("b", 0.8, 15, 5)
    apart = Match("c", 0.7, 40, 5)
    assert uniquify([best, inside, apart]) == [best, apart]


def test_match_names():
    assert match_names([Match("x"), Match("y")]) == ["x", "y"]


def test_flatten_whitespace():
    assert flatten_whitespace("a \t\n\r b\n\nc") == "a b c"