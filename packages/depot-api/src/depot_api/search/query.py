# SPDX-License-Identifier: MIT
"""Search query parsing.

A query is a sequence of whitespace separated tokens. Tokens prefixed with
``tag:`` or ``author:`` (case-insensitive) become clauses that every result
must satisfy; the remaining tokens form a free-text query matched against
package ids. Values may be double-quoted to include whitespace:

    tag:beta author:"Jane Doe" widgets
"""

from dataclasses import dataclass, field
from typing import Iterable, Optional

TAG_PREFIX = "tag:"
AUTHOR_PREFIX = "author:"


@dataclass(frozen=True)
class SearchQuery:
    """A parsed search query.

    Attributes:
        text_query: Free-text terms joined by single spaces, or None
        tags: Required tags, de-duplicated case-insensitively
        authors: Required author fragments, de-duplicated case-insensitively
    """

    text_query: Optional[str] = None
    tags: tuple[str, ...] = field(default_factory=tuple)
    authors: tuple[str, ...] = field(default_factory=tuple)

    @property
    def has_clauses(self) -> bool:
        """True when tag or author clauses require post-filtering."""
        return bool(self.tags or self.authors)


def _read_value(text: str, index: int) -> tuple[str, int]:
    if index >= len(text):
        return "", index

    if text[index] == '"':
        index += 1
        start = index
        while index < len(text) and text[index] != '"':
            index += 1
        value = text[start:index]
        if index < len(text):
            index += 1
        return value, index

    start = index
    while index < len(text) and not text[index].isspace():
        index += 1
    return text[start:index], index


def _starts_with_at(text: str, index: int, prefix: str) -> bool:
    return text[index : index + len(prefix)].lower() == prefix


def tokenize_query(text: str) -> list[str]:
    """Split a raw query into tokens, keeping the tag/author prefixes."""
    tokens = []
    index = 0
    length = len(text)

    while index < length:
        while index < length and text[index].isspace():
            index += 1
        if index >= length:
            break

        prefix = None
        if _starts_with_at(text, index, TAG_PREFIX):
            prefix = TAG_PREFIX
        elif _starts_with_at(text, index, AUTHOR_PREFIX):
            prefix = AUTHOR_PREFIX

        if prefix is not None:
            index += len(prefix)
            while index < length and text[index].isspace():
                index += 1
            value, index = _read_value(text, index)
            tokens.append(prefix + value)
            continue

        value, index = _read_value(text, index)
        tokens.append(value)

    return tokens


def _dedupe(values: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, str] = {}
    for value in values:
        seen.setdefault(value.lower(), value)
    return tuple(seen.values())


def parse_search_query(text: Optional[str]) -> SearchQuery:
    """Parse a raw search string.

    Examples:
        >>> parse_search_query('tag:beta author:"Jane Doe" widgets')
        SearchQuery(text_query='widgets', tags=('beta',), authors=('Jane Doe',))
    """
    if text is None or not text.strip():
        return SearchQuery()

    terms = []
    tags = []
    authors = []
    for token in tokenize_query(text):
        lowered = token.lower()
        if lowered.startswith(TAG_PREFIX):
            tag = token[len(TAG_PREFIX) :].strip()
            if tag:
                tags.append(tag)
        elif lowered.startswith(AUTHOR_PREFIX):
            author = token[len(AUTHOR_PREFIX) :].strip()
            if author:
                authors.append(author)
        else:
            terms.append(token)

    return SearchQuery(
        text_query=" ".join(terms) if terms else None,
        tags=_dedupe(tags),
        authors=_dedupe(authors),
    )


def has_all_tags(package_tags: Optional[Iterable[str]], required: Iterable[str]) -> bool:
    """True if every required tag is one of the package's tags, ignoring case."""
    required = list(required)
    if not required:
        return True
    present = {tag.lower() for tag in package_tags or ()}
    if not present:
        return False
    return all(tag.lower() in present for tag in required)


def has_all_authors(package_authors: Optional[Iterable[str]], required: Iterable[str]) -> bool:
    """True if every required fragment occurs in some package author, ignoring case."""
    required = list(required)
    if not required:
        return True
    authors = [author.lower() for author in package_authors or () if author]
    if not authors:
        return False
    return all(any(fragment.lower() in author for author in authors) for fragment in required)
