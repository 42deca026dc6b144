"""Immutable coach/student registries.

A Registry indexes every alias of every entry under a normalized key
(lowercase, trimmed, whitespace collapsed) plus a concatenated variant
with spaces removed, so "JennyDuan" finds "Jenny Duan".

Lookup order for lookup_exact:
1. Full-string match (normalized or concatenated form)
2. Containment in either direction (text contains alias, alias contains text)
"""

import re
from collections.abc import Iterable, Iterator
from types import MappingProxyType

import structlog

from src.registry.schemas import RegistryEntry, RegistryKind
from src.registry.similarity import SimilarityMatcher

logger = structlog.get_logger()

# Shorter fragments match too many aliases to be useful for containment
MIN_PARTIAL_LENGTH = 3

_WHITESPACE = re.compile(r"\s+")
_EMAIL_SEPARATORS = re.compile(r"[._\-+\d]+")


def normalize(text: str | None) -> str:
    """Lowercase, trim, and collapse internal whitespace."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", text).strip().lower()


def concatenated(text: str) -> str:
    """Normalized form with all spaces removed."""
    return normalize(text).replace(" ", "")


class Registry:
    """Read-only alias index over one kind of entry.

    Built once; the index is exposed only through read-only views, so a
    Registry can be shared across threads without locking.
    """

    def __init__(
        self,
        kind: RegistryKind,
        entries: Iterable[RegistryEntry],
        matcher: SimilarityMatcher | None = None,
    ):
        """Build the alias index.

        Args:
            kind: Coach or student registry
            entries: Entries in priority order (earlier wins fuzzy ties)
            matcher: Similarity matcher for fuzzy lookups
        """
        self._kind = kind
        self._entries = tuple(entries)
        self._matcher = matcher or SimilarityMatcher()
        self._index = MappingProxyType(self._build_index())
        self._keys = tuple(self._index.keys())
        self._emails = MappingProxyType(
            {
                entry.email_local_part: entry
                for entry in self._entries
                if entry.email_local_part
            }
        )

    @property
    def kind(self) -> RegistryKind:
        return self._kind

    @property
    def entries(self) -> tuple[RegistryEntry, ...]:
        return self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, text: object) -> bool:
        return isinstance(text, str) and self.lookup_exact(text) is not None

    def _build_index(self) -> dict[str, RegistryEntry]:
        """Map normalized aliases to entries.

        Secondary names go in first, canonical names last, so an entry's
        canonical name always resolves to that entry. Remaining collisions
        are last-write-wins.
        """
        index: dict[str, RegistryEntry] = {}

        def put(name: str | None, entry: RegistryEntry) -> None:
            for key in {normalize(name), concatenated(name or "")}:
                if not key:
                    continue
                existing = index.get(key)
                if existing is not None and existing is not entry:
                    logger.debug(
                        "Registry alias collision",
                        kind=self._kind.value,
                        alias=key,
                        previous=existing.canonical_name,
                        current=entry.canonical_name,
                    )
                index[key] = entry

        for entry in self._entries:
            for name in entry.searchable_names()[1:]:
                put(name, entry)
            for name in sorted(entry.parent_aliases):
                put(name, entry)
            if entry.email_local_part:
                put(entry.email_local_part, entry)

        for entry in self._entries:
            put(entry.canonical_name, entry)

        return index

    def iter_aliases(self) -> Iterator[tuple[str, RegistryEntry]]:
        """Yield (normalized alias, entry) pairs in index order."""
        yield from self._index.items()

    def lookup_exact(self, text: str | None) -> RegistryEntry | None:
        """Find an entry by full or partial alias match.

        Args:
            text: Name as it appeared in the source

        Returns:
            Matched entry or None
        """
        direct = self.lookup_full(text)
        if direct is not None:
            return direct

        key = normalize(text)
        return self._lookup_partial(key) if key else None

    def lookup_full(self, text: str | None) -> RegistryEntry | None:
        """Full-string alias match only (normalized or concatenated form)."""
        key = normalize(text)
        if not key:
            return None
        return self._index.get(key) or self._index.get(key.replace(" ", ""))

    def _lookup_partial(self, key: str) -> RegistryEntry | None:
        """Containment match; the longest matching alias wins."""
        best: RegistryEntry | None = None
        best_length = 0
        for alias in self._keys:
            if len(alias) >= MIN_PARTIAL_LENGTH and alias in key:
                matched = len(alias)
            elif len(key) >= MIN_PARTIAL_LENGTH and key in alias:
                matched = len(key)
            else:
                continue
            if matched > best_length:
                best = self._index[alias]
                best_length = matched
        return best

    def match_fuzzy(
        self, text: str | None, threshold: float | None = None
    ) -> tuple[RegistryEntry | None, float]:
        """Find the entry with the most similar alias.

        Args:
            text: Name to search for
            threshold: Similarity the best alias must exceed
                      (defaults to the matcher threshold)

        Returns:
            Tuple of (entry, score) or (None, 0.0) if nothing is close enough
        """
        key = normalize(text)
        if not key or not self._keys:
            return None, 0.0

        index, score = self._matcher.best_match(key, self._keys, threshold)
        if index is None:
            return None, 0.0
        return self._index[self._keys[index]], score

    def lookup_fuzzy(
        self, text: str | None, threshold: float | None = None
    ) -> RegistryEntry | None:
        """Fuzzy lookup returning only the entry.

        The threshold defaults to the matcher's (0.8 unless configured).
        """
        entry, _score = self.match_fuzzy(text, threshold)
        return entry

    def lookup_email(self, email: str | None) -> RegistryEntry | None:
        """Find an entry from an email address or its local part.

        Tries the entry email local parts first, then treats the local
        part as a name ("jenny.duan" -> "jenny duan").
        """
        if not email:
            return None
        local = email.split("@", 1)[0].strip().lower()
        if not local:
            return None

        entry = self._emails.get(local)
        if entry is not None:
            return entry

        as_name = _EMAIL_SEPARATORS.sub(" ", local).strip()
        return self.lookup_exact(as_name) if as_name else None

    def mentions(self, text: str | None, entry: RegistryEntry) -> bool:
        """Whether text contains any alias of the given entry."""
        haystack = normalize(text)
        if not haystack:
            return False
        return any(
            candidate is entry and contains_word(haystack, alias)
            for alias, candidate in self._index.items()
        )


class Registries:
    """Immutable coach/student registry pair for one data snapshot."""

    def __init__(self, coaches: Registry, students: Registry):
        self._coaches = coaches
        self._students = students

    @property
    def coaches(self) -> Registry:
        return self._coaches

    @property
    def students(self) -> Registry:
        return self._students


def contains_word(haystack: str, needle: str) -> bool:
    """Whole-word containment of an already-normalized needle."""
    if not needle:
        return False
    pattern = rf"(?<![a-z0-9]){re.escape(needle)}(?![a-z0-9])"
    return re.search(pattern, haystack) is not None


def find_alias_in_text(
    registry: Registry, text: str | None
) -> tuple[str, RegistryEntry] | None:
    """Find the longest registry alias appearing as a whole word in text."""
    haystack = normalize(text)
    if not haystack:
        return None
    best: tuple[str, RegistryEntry] | None = None
    for alias, entry in registry.iter_aliases():
        if len(alias) < MIN_PARTIAL_LENGTH:
            continue
        if not contains_word(haystack, alias):
            continue
        if best is None or len(alias) > len(best[0]):
            best = (alias, entry)
    return best
