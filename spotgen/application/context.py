"""Collaborators and tuning values shared by every entry in a run."""

from attrs import define

from spotgen.config import settings
from spotgen.domain.interfaces import CatalogClient, EngagementService


@define(frozen=True, slots=True)
class ResolutionContext:
    """Injected into each entry at construction time."""

    catalog: CatalogClient
    engagement: EngagementService | None = None
    lastfm_user: str | None = None
    market: str = "US"
    concurrency: int = 5
    similar_artist_limit: int = 20
    similar_track_limit: int = 5

    @classmethod
    def from_settings(
        cls,
        catalog: CatalogClient,
        engagement: EngagementService | None = None,
    ) -> "ResolutionContext":
        """Build a context using the configured defaults."""
        return cls(
            catalog=catalog,
            engagement=engagement,
            lastfm_user=settings.credentials.lastfm_username or None,
            market=settings.api.spotify_market,
            concurrency=settings.api.spotify_concurrency,
            similar_artist_limit=settings.generator.similar_artist_limit,
            similar_track_limit=settings.generator.similar_track_limit,
        )
