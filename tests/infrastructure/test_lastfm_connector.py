"""Tests for Last.fm play count lookups."""

from unittest.mock import Mock

import pylast
import pytest

from spotgen.config import settings
from spotgen.domain.errors import CatalogError
from spotgen.infrastructure.connectors.lastfm import LastFMConnector


@pytest.fixture(autouse=True)
def fast_retries(monkeypatch):
    monkeypatch.setattr(settings.api, "lastfm_retry_count", 2)
    monkeypatch.setattr(settings.api, "lastfm_retry_interval", 0)


@pytest.fixture
def lastfm_track():
    track = Mock()
    track.get_playcount.return_value = "1000"
    track.get_userplaycount.return_value = "12"
    return track


@pytest.fixture
def client(lastfm_track):
    client = Mock()
    client.get_track.return_value = lastfm_track
    return client


@pytest.fixture
def connector(client):
    return LastFMConnector(api_key="key", lastfm_username="me", client=client)


class TestTrackEngagement:
    @pytest.mark.asyncio
    async def test_global_and_personal_counts(self, connector, client, lastfm_track):
        """Counts are parsed and the user is set on the track."""
        stats = await connector.get_track_engagement("Beyonce", "Halo")

        assert stats.global_playcount == 1000
        assert stats.personal_playcount == 12
        assert lastfm_track.username == "me"
        client.get_track.assert_called_once_with("Beyonce", "Halo")

    @pytest.mark.asyncio
    async def test_explicit_username_wins(self, connector, lastfm_track):
        await connector.get_track_engagement("Beyonce", "Halo", username="other")

        assert lastfm_track.username == "other"

    @pytest.mark.asyncio
    async def test_no_user_skips_personal_count(self, client, lastfm_track, monkeypatch):
        monkeypatch.setattr(settings.credentials, "lastfm_username", "")
        connector = LastFMConnector(api_key="key", client=client)

        stats = await connector.get_track_engagement("Beyonce", "Halo")

        assert stats.personal_playcount is None
        lastfm_track.get_userplaycount.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_track_is_none(self, connector, lastfm_track):
        """Last.fm reports unknown tracks as a WSError."""
        lastfm_track.get_playcount.side_effect = pylast.WSError(
            None, "6", "Track not found"
        )

        assert await connector.get_track_engagement("Nobody", "Nothing") is None
        assert lastfm_track.get_playcount.call_count == 1

    @pytest.mark.asyncio
    async def test_network_failure_retried_then_raised(self, connector, client):
        client.get_track.side_effect = pylast.NetworkError(None, OSError("down"))

        with pytest.raises(CatalogError):
            await connector.get_track_engagement("Beyonce", "Halo")
        assert client.get_track.call_count == 2

    @pytest.mark.asyncio
    async def test_without_api_key(self, monkeypatch):
        monkeypatch.setattr(settings.credentials, "lastfm_key", "")
        connector = LastFMConnector()

        assert connector.client is None
        assert await connector.get_track_engagement("Beyonce", "Halo") is None
