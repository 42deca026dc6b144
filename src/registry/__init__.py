"""Coach/student reference data for name resolution.

This module provides:
- RegistryEntry: Canonical name plus aliases, parent names, email
- Registry: Immutable alias index with exact, partial, fuzzy and email lookup
- SimilarityMatcher: Normalized Levenshtein ratio using RapidFuzz
- RegistryLoader / RegistryProvider: CSV/JSON loading with built-in fallback
"""

from src.registry.loader import RegistryLoader, RegistryLoadError, RegistryProvider
from src.registry.registry import Registries, Registry, normalize
from src.registry.schemas import RegistryEntry, RegistryKind
from src.registry.similarity import SimilarityMatcher

__all__ = [
    "Registries",
    "Registry",
    "RegistryEntry",
    "RegistryKind",
    "RegistryLoadError",
    "RegistryLoader",
    "RegistryProvider",
    "SimilarityMatcher",
    "normalize",
]
