"""NamingService: recording metadata in, canonical identifier out.

Reads the provider's current registry snapshot once per call and
rebuilds its resolver only when the snapshot changes (after refresh()).
"""

import structlog
from pydantic import BaseModel, ConfigDict

from src.config import Settings, get_settings
from src.naming.builder import IdentifierBuilder
from src.naming.schemas import CanonicalIdentifier
from src.registry import Registries, RegistryProvider
from src.resolution.resolver import CascadingResolver
from src.resolution.schemas import ExtractionContext, ExtractionResult

logger = structlog.get_logger()


class NamingOutcome(BaseModel):
    """Resolution result and the identifier built from it."""

    model_config = ConfigDict(frozen=True)

    result: ExtractionResult
    identifier: CanonicalIdentifier


class NamingService:
    """Facade over resolution and identifier building."""

    def __init__(
        self,
        provider: RegistryProvider,
        settings: Settings | None = None,
        builder: IdentifierBuilder | None = None,
    ):
        """Initialize service.

        Args:
            provider: Source of registry snapshots
            settings: Thresholds and domain lists (default: global settings)
            builder: Identifier builder
        """
        self._provider = provider
        self._settings = settings or get_settings()
        self._builder = builder or IdentifierBuilder()
        self._cached: tuple[Registries, CascadingResolver] | None = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "NamingService":
        """Create a service whose registries come from the configured files."""
        settings = settings or get_settings()
        return cls(RegistryProvider.from_settings(settings), settings)

    def resolver(self) -> CascadingResolver:
        """Resolver bound to the provider's current snapshot."""
        registries = self._provider.current
        cached = self._cached
        if cached is not None and cached[0] is registries:
            return cached[1]

        resolver = CascadingResolver(registries, self._settings)
        self._cached = (registries, resolver)
        logger.debug(
            "Resolver built for registry snapshot",
            coaches=len(registries.coaches),
            students=len(registries.students),
        )
        return resolver

    def name_recording(self, ctx: ExtractionContext | None) -> NamingOutcome:
        """Resolve a recording and build its identifier.

        Args:
            ctx: Recording metadata

        Returns:
            NamingOutcome with the result and identifier
        """
        if ctx is None:
            ctx = ExtractionContext()

        result = self.resolver().resolve(ctx)
        identifier = self._builder.build(
            result,
            date=ctx.timestamp,
            meeting_id=ctx.meeting_id,
            uuid=ctx.uuid,
            data_source=ctx.data_source,
        )

        logger.info(
            "Recording named",
            identifier=identifier.value,
            score=result.score,
            requires_review=result.requires_review,
        )
        return NamingOutcome(result=result, identifier=identifier)
