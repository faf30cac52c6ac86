"""
Search and matching utilities for the record lists.
"""

import re
from typing import Any, Callable, List, Sequence, TypeVar

T = TypeVar("T")


class SearchHelper:
    """Search and matching utilities"""

    EXACT_SCORE = 100
    PREFIX_SCORE = 50
    CONTAINS_SCORE = 25
    SUBSEQUENCE_SCORE = 10

    @staticmethod
    def is_subsequence(text: str, query: str) -> bool:
        """Check if all characters in query appear in text in order"""
        position = 0
        for char in text:
            if position < len(query) and char == query[position]:
                position += 1
        return position == len(query)

    @classmethod
    def score(cls, value: str, query: str) -> int:
        """Score a single field against an already-normalized query"""
        value = value.lower()
        if value == query:
            return cls.EXACT_SCORE
        if value.startswith(query):
            return cls.PREFIX_SCORE
        if query in value:
            return cls.CONTAINS_SCORE
        if cls.is_subsequence(value, query):
            return cls.SUBSEQUENCE_SCORE
        return 0

    @classmethod
    def fuzzy_search(
        cls,
        items: Sequence[T],
        query: str,
        keys: Sequence[str],
        getter: Callable[[T, str], Any] = None,
    ) -> List[T]:
        """
        Rank items by how well the given fields match ``query``.

        Each field contributes its best tier (exact, prefix, substring,
        in-order subsequence); items scoring zero are dropped and the rest
        are returned best first. An empty query returns the items unchanged.
        """
        if not query:
            return list(items)

        normalized = query.lower().strip()
        getter = getter or (lambda item, key: item.get(key) if isinstance(item, dict) else getattr(item, key, None))

        scored = []
        for item in items:
            total = sum(cls.score(str(getter(item, key) or ""), normalized) for key in keys)
            if total > 0:
                scored.append((total, item))

        # sorted() is stable, ties keep input order
        return [item for _, item in sorted(scored, key=lambda pair: pair[0], reverse=True)]

    @staticmethod
    def highlight_matches(text: str, query: str,
                          highlight_start: str = '<mark>',
                          highlight_end: str = '</mark>') -> str:
        """Highlight search matches in text"""
        if not text or not query:
            return text

        pattern = re.compile(f'({re.escape(query)})', re.IGNORECASE)
        return pattern.sub(f'{highlight_start}\\1{highlight_end}', text)


fuzzy_search = SearchHelper.fuzzy_search
highlight_text = SearchHelper.highlight_matches

__all__ = ["SearchHelper", "fuzzy_search", "highlight_text"]
