# nearmatch

`nearmatch` finds which of a set of known texts an unknown text is closest
to. It measures how close two texts are by their Levenshtein distance and
reports that as a confidence between 0.0 and 1.0. A confidence of 1.0 means
the texts are identical after normalisation.

It can also find known texts embedded inside a larger document. The known
texts are broken into tokens and the tokens are hashed in overlapping chunks.
Only the regions of the document whose hashes line up with a known text get
the more expensive edit-distance comparison.

The package needs nothing beyond the standard library.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Finding the nearest known text

```python
from nearmatch.classifier import Classifier, flatten_whitespace

classifier = Classifier(0.8, flatten_whitespace)
classifier.add_value("mit", mit_text)
classifier.add_value("bsd-2", bsd_text)

match = classifier.nearest_match(unknown_text)
print(match.name, match.confidence)
```

`Classifier(threshold, *normalizers)` applies each normaliser in order to
every text before comparing it. `flatten_whitespace` collapses runs of
whitespace into a single space.

`nearest_match` skips known texts whose length is too far from the unknown
text's length. The `min_diff_ratio` attribute controls this; it defaults to
0.75, meaning the shorter text must be at least 75% as long as the longer one.
If the normalised unknown text equals a known text, that one is returned with
confidence 1.0. If nothing matches, an empty `Match()` (empty name,
confidence 0.0) is returned.

`add_value` and `add_precomputed_value` raise `ValueError` when the key is
already registered. The normalised known text is also compiled as a regular
expression (used to find exact occurrences); a text that is not a valid
pattern raises `ValueError`.

## Finding known texts inside a document

```python
for match in classifier.multiple_match(document):
    print(match.name, match.confidence, match.offset, match.extent)
```

`multiple_match` returns the matches sorted by confidence, highest first,
then by name, offset and longest extent. It drops any match that starts
inside a better one. A candidate region is only measured when the share of
the known text's tokens it covers reaches the classifier's `threshold`.

Each `Match` gives:

- `offset`: the UTF-8 byte offset where the match starts in the normalised
  document.
- `extent`: the length of the match in bytes.

The helpers `sort_matches`, `uniquify` and `match_names` in
`nearmatch.classifier` apply the same ordering and filtering to any list of
matches. `lev_dist`, `confidence_percentage` and `diff_ratio` expose the
scoring used by the classifier.

## Lower-level pieces

- `nearmatch.tokenizer`: `tokenize` splits text into word and punctuation
  tokens with UTF-8 byte offsets. `generate_hashes` computes CRC-32 checksums
  over token windows and records them in a `Hash`. `combine_unique` merges
  two lists of `TokenRange` without duplicates.
- `nearmatch.searchset`: `SearchSet` holds the tokens and chunk hashes of one
  text. `find_potential_matches(src, target)` returns the token ranges of
  `target` that are likely copies of `src`, as lists of `MatchRange`.
  `target_range` turns such a list into byte offsets in the target and
  `ranges_size` counts the source tokens it covers. A `SearchSet` can be
  written to a binary stream with `serialize` (as JSON) and read back with
  `SearchSet.deserialize`, which raises `ValueError` on malformed input. Such
  a precomputed set can be handed to `Classifier.add_precomputed_value`.
- `nearmatch.diff`: `diff_main` computes a character diff as a list of `Diff`
  records (each with an `Operation` of `DELETE`, `EQUAL` or `INSERT`), and
  `diff_levenshtein` gives its edit distance.
- `nearmatch.pq`: `Queue` is a priority queue ordered by a `less` function.
  Given a `set_index` callback it reports element positions, so entries can
  be re-prioritised with `fix` or dropped with `remove`. `min` and `pop` on an
  empty queue raise `IndexError`.
- `nearmatch.intset`: `IntSet` is a set of integers with `intersect`,
  `union`, `difference`, `unique`, `disjoint` and `equal`.
- `nearmatch.results`: `LicenseType` is a per-file classification record.
  `sort_license_types` orders records by confidence, then by file name.

## What it does not do

`nearmatch` is a library only. It has no command-line tool, ships no corpus
of known texts (you add your own with `add_value`), and does not read files
or extract comments from source code; it works on the strings you pass in.