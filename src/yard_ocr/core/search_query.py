"""
Marketplace Search Query Helpers
================================

Builds the free-text queries handed to a marketplace search client.
A query is one vehicle's display text extended with negative keywords
("2015 CHEVROLET IMPALA -manual -repair"), the exclusion syntax most
listing search APIs understand.

No network access happens here; the search client owns the request.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, NamedTuple, Optional

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT: int = 20

# Normalized words of this length or shorter are never excluded
MIN_EXCLUDE_LENGTH: int = 3

_NON_WORD_PATTERN = re.compile(r'[^\w\s]')


def normalize_keyword(word: str) -> str:
    """Lower-case a word and strip punctuation ("Manual," -> "manual")."""
    return _NON_WORD_PATTERN.sub('', word.lower()).strip()


def build_search_query(query: str, exclude_keywords: Iterable[str] = ()) -> str:
    """
    Append negative keywords to a search query.

    Args:
        query: Free-text query, usually a Vehicle.full_text
        exclude_keywords: Words that listings must not contain

    Returns:
        "query -kw1 -kw2", or the stripped query when there is nothing to exclude

    Examples:
        >>> build_search_query("2015 CHEVROLET IMPALA", ["manual", "repair"])
        '2015 CHEVROLET IMPALA -manual -repair'
    """
    query = query.strip()
    exclusions = ' '.join(f"-{kw}" for kw in exclude_keywords if kw)
    if not exclusions:
        return query
    return f"{query} {exclusions}"


class ExclusionList:
    """
    Ordered, duplicate-free set of excluded keywords.

    Keywords are stored in their normalized (lower-case, unpunctuated) form
    so that title words toggle on and off regardless of punctuation.
    """

    def __init__(self, keywords: Optional[Iterable[str]] = None, min_length: int = MIN_EXCLUDE_LENGTH):
        self.min_length = min_length
        self._keywords: List[str] = []
        for keyword in keywords or ():
            self.add(keyword)

    def add(self, word: str) -> bool:
        """Add a keyword. Returns False if it was already present or empty."""
        keyword = normalize_keyword(word)
        if not keyword or keyword in self._keywords:
            return False
        self._keywords.append(keyword)
        return True

    def remove(self, word: str) -> bool:
        """Remove a keyword. Returns False if it was not present."""
        keyword = normalize_keyword(word)
        if keyword not in self._keywords:
            return False
        self._keywords.remove(keyword)
        return True

    def toggle(self, word: str) -> bool:
        """
        Flip a title word in or out of the list.

        Words of min_length - 1 characters or fewer are ignored.

        Returns:
            True if the word is excluded after the call
        """
        keyword = normalize_keyword(word)
        if len(keyword) < self.min_length:
            logger.debug(f"Ignoring short keyword toggle: '{word}'")
            return keyword in self._keywords
        if keyword in self._keywords:
            self._keywords.remove(keyword)
            return False
        self._keywords.append(keyword)
        return True

    def __contains__(self, word: object) -> bool:
        return isinstance(word, str) and normalize_keyword(word) in self._keywords

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._keywords))

    def __len__(self) -> int:
        return len(self._keywords)

    def __repr__(self) -> str:
        return f"ExclusionList({self._keywords!r})"


class TitleToken(NamedTuple):
    """A listing title word, with punctuation kept for display."""
    word: str
    is_excluded: bool


def tokenize_title(title: str, exclusions: Iterable[str]) -> List[TitleToken]:
    """Split a listing title into words flagged against the exclusion list."""
    excluded = {normalize_keyword(kw) for kw in exclusions}
    return [
        TitleToken(word, normalize_keyword(word) in excluded)
        for word in title.split()
    ]


@dataclass
class SearchRequest:
    """One marketplace search, ready to hand to a search client."""
    query: str
    exclude_keywords: List[str] = field(default_factory=list)
    limit: int = DEFAULT_SEARCH_LIMIT

    @property
    def full_query(self) -> str:
        return build_search_query(self.query, self.exclude_keywords)

    def to_params(self) -> Dict[str, Any]:
        """Query-string parameters for the search endpoint."""
        return {
            'q': self.full_query,
            'limit': str(self.limit),
        }
