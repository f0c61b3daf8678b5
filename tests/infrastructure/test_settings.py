"""Tests for settings loading."""

from spotgen.config import Settings


def test_defaults(monkeypatch):
    monkeypatch.delenv("API__SPOTIFY_MARKET", raising=False)
    config = Settings(_env_file=None)

    assert config.api.spotify_market == "US"
    assert config.api.spotify_concurrency == 5
    assert config.generator.default_format == "uri"
    assert config.generator.unique is True


def test_nested_environment_variables(monkeypatch):
    monkeypatch.setenv("API__SPOTIFY_MARKET", "GB")
    monkeypatch.setenv("GENERATOR__SIMILAR_TRACK_LIMIT", "3")

    config = Settings(_env_file=None)

    assert config.api.spotify_market == "GB"
    assert config.generator.similar_track_limit == 3


def test_flat_names_map_to_groups():
    config = Settings(
        _env_file=None,
        spotify_client_id="client",
        lastfm_key="key",
        console_log_level="DEBUG",
    )

    assert config.credentials.spotify_client_id == "client"
    assert config.credentials.lastfm_key == "key"
    assert config.logging.console_level == "DEBUG"
