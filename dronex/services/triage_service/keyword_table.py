"""Keyword table: category -> weighted keywords.

The table is process-wide read-only configuration. It is built once,
either from DEFAULT_KEYWORD_TABLE or from a JSON file, and never mutated.

JSON format (object key order is the category declaration order):

    {
        "fire": {"fire": 3, "smoke": 2},
        "flood": {"flood": 3, "rising water": 2}
    }
"""
import json
import logging
import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, Mapping, Optional, Tuple, Union

from .config import DEFAULT_KEYWORD_TABLE

logger = logging.getLogger(__name__)

WeightedKeyword = Tuple[str, float]


@dataclass(frozen=True)
class CategoryKeywords:
    """Ordered, de-duplicated weighted keywords for one category."""
    name: str
    keywords: Tuple[WeightedKeyword, ...]


class KeywordTable:
    """Immutable ordered mapping of category name to weighted keywords.

    Keywords are lowercased on the way in. A keyword repeated within one
    category keeps its first weight. Weights must be finite and positive.
    """

    __slots__ = ("_categories",)

    def __init__(self, categories: Iterable[Tuple[str, Iterable[WeightedKeyword]]]):
        built = []
        seen_names = set()
        for name, keywords in categories:
            if not isinstance(name, str) or not name.strip():
                raise ValueError(f"Category name must be a non-empty string, got {name!r}")
            name = name.strip().lower()
            if name in seen_names:
                raise ValueError(f"Duplicate category: {name}")
            seen_names.add(name)
            built.append(CategoryKeywords(name=name, keywords=self._normalize(name, keywords)))
        object.__setattr__(self, "_categories", tuple(built))

    def __setattr__(self, key, value):
        raise AttributeError("KeywordTable is immutable")

    @staticmethod
    def _normalize(category: str, keywords: Iterable[WeightedKeyword]) -> Tuple[WeightedKeyword, ...]:
        result = []
        seen = set()
        for keyword, weight in keywords:
            if not isinstance(keyword, str) or not keyword.strip():
                raise ValueError(f"Empty keyword in category {category!r}")
            if (
                isinstance(weight, bool)
                or not isinstance(weight, (int, float))
                or not math.isfinite(weight)
                or weight <= 0
            ):
                raise ValueError(
                    f"Keyword {keyword!r} in category {category!r} needs a finite positive weight, got {weight!r}"
                )
            keyword = keyword.strip().lower()
            if keyword in seen:
                continue
            seen.add(keyword)
            result.append((keyword, float(weight)))
        return tuple(result)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Mapping[str, float]]) -> "KeywordTable":
        """Build from a {category: {keyword: weight}} mapping, keeping insertion order."""
        if not isinstance(data, Mapping):
            raise ValueError("Keyword table must be a mapping of category -> {keyword: weight}")
        categories = []
        for name, keywords in data.items():
            if not isinstance(keywords, Mapping):
                raise ValueError(f"Keywords for category {name!r} must be a mapping of keyword -> weight")
            categories.append((name, keywords.items()))
        return cls(categories)

    @property
    def categories(self) -> Tuple[CategoryKeywords, ...]:
        return self._categories

    @property
    def category_names(self) -> Tuple[str, ...]:
        return tuple(category.name for category in self._categories)

    @property
    def keyword_count(self) -> int:
        return sum(len(category.keywords) for category in self._categories)

    def __iter__(self) -> Iterator[CategoryKeywords]:
        return iter(self._categories)

    def __len__(self) -> int:
        return len(self._categories)

    def __contains__(self, name: object) -> bool:
        return name in self.category_names

    def __repr__(self) -> str:
        return f"KeywordTable(categories={list(self.category_names)!r})"


def load_keyword_table(path: Union[str, Path]) -> KeywordTable:
    """Read a keyword table from a JSON file.

    Args:
        path: Path to a JSON object of {category: {keyword: weight}}

    Returns:
        KeywordTable in file declaration order

    Raises:
        ValueError: If the file is not valid JSON or has the wrong shape
        OSError: If the file cannot be read
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Keyword table {path} is not valid JSON: {e}") from e

    table = KeywordTable.from_mapping(data)
    logger.info(
        "KEYWORD_TABLE_LOADED",
        extra={
            "source": str(path),
            "category_count": len(table),
            "keyword_count": table.keyword_count,
        }
    )
    return table


def default_keyword_table() -> KeywordTable:
    """Build the built-in table from config.DEFAULT_KEYWORD_TABLE."""
    return KeywordTable(DEFAULT_KEYWORD_TABLE)


# Module-level singleton, built on first use
_keyword_table: Optional[KeywordTable] = None


def get_keyword_table() -> KeywordTable:
    """Get the process-wide keyword table.

    Reads KEYWORD_TABLE_PATH on first call; falls back to the built-in table.
    """
    global _keyword_table
    if _keyword_table is None:
        path = os.getenv("KEYWORD_TABLE_PATH")
        _keyword_table = load_keyword_table(path) if path else default_keyword_table()
    return _keyword_table
