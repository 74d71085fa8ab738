"""Nearest-match classification of texts by token hashing and edit distance."""

__version__ = "0.1.0"
__all__ = ["classifier", "diff", "intset", "pq", "results", "searchset", "tokenizer"]