"""spotgen: generate Spotify playlists from plain-text descriptions."""

__version__ = "0.3.0"
