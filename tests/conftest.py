"""Pytest configuration and fixtures."""

import pytest

from src.config import Settings
from src.registry import Registries, Registry, RegistryKind
from src.registry.builtin import BUILTIN_COACHES, BUILTIN_STUDENTS
from src.resolution.resolver import CascadingResolver


@pytest.fixture
def settings() -> Settings:
    """Default settings, ignoring any local .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def registries() -> Registries:
    """Registries built from the built-in coach/student tables."""
    return Registries(
        coaches=Registry(RegistryKind.COACH, BUILTIN_COACHES),
        students=Registry(RegistryKind.STUDENT, BUILTIN_STUDENTS),
    )


@pytest.fixture
def resolver(registries: Registries, settings: Settings) -> CascadingResolver:
    """Resolver with the standard stage cascade."""
    return CascadingResolver(registries, settings)
