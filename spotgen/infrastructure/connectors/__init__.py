"""Connectors for the Spotify catalog and Last.fm engagement services."""

from spotgen.application.context import ResolutionContext
from spotgen.config import get_logger, settings

from .lastfm import LastFMConnector
from .spotify import SpotifyConnector

logger = get_logger(__name__)


def create_context() -> ResolutionContext:
    """Build a resolution context backed by the real services.

    Last.fm is only wired in when an API key is configured.
    """
    engagement = None
    if settings.credentials.lastfm_key:
        engagement = LastFMConnector()
    else:
        logger.debug("No Last.fm key configured, play counts are unavailable")
    return ResolutionContext.from_settings(SpotifyConnector(), engagement)


__all__ = ["LastFMConnector", "SpotifyConnector", "create_context"]
