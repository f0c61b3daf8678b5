"""Tests for track resolution and lazy properties."""

import pytest

from spotgen.application.context import ResolutionContext
from spotgen.application.entries import Track
from spotgen.domain.errors import CatalogError, EntryNotFoundError
from tests.fixtures.catalog import FakeEngagement, make_track


class TestSearchFallbacks:
    @pytest.mark.asyncio
    async def test_plain_entry_resolves_best_match(self, context, catalog):
        remix = make_track("Postscript (Remix)", "Other", popularity=90)
        original = make_track("Postscript", "Bowery Electric", popularity=40)
        catalog.on_search("track", "Bowery Electric - Postscript", remix, original)

        track = await Track(context, entry="Bowery Electric - Postscript").dispatch()

        assert track.uri == original.uri
        assert track.title == "Bowery Electric - Postscript"
        assert track.entry == "Bowery Electric - Postscript"

    @pytest.mark.asyncio
    async def test_structured_query_first(self, context, catalog):
        record = make_track("Halo", "Beyonce", album="I Am")
        catalog.on_search("track", 'track:"Halo" artist:"Beyonce" album:"I Am"', record)

        track = Track(context, entry="Beyonce - Halo", artist="Beyonce", name="Halo", album="I Am")
        await track.dispatch()

        assert track.uri == record.uri
        assert len(catalog.searches) == 1

    @pytest.mark.asyncio
    async def test_swapped_artist_and_title(self, context, catalog):
        record = make_track("Halo", "Beyonce")
        catalog.on_search("track", 'track:"Halo" artist:"Beyonce"', record)

        # artist and title given the wrong way round
        track = Track(context, entry="Halo - Beyonce", artist="Halo", name="Beyonce")
        await track.dispatch()

        assert track.uri == record.uri
        assert catalog.searches == [
            ("track", 'track:"Beyonce" artist:"Halo"'),
            ("track", 'track:"Halo" artist:"Beyonce"'),
        ]

    @pytest.mark.asyncio
    async def test_drops_album_when_needed(self, context, catalog):
        record = make_track("Halo", "Beyonce")
        catalog.on_search("track", 'track:"Halo" artist:"Beyonce"', record)

        track = Track(context, entry="x", artist="Beyonce", name="Halo", album="Wrong Album")
        await track.dispatch()

        assert track.uri == record.uri
        assert [query for _, query in catalog.searches] == [
            'track:"Halo" artist:"Beyonce" album:"Wrong Album"',
            'track:"Beyonce" artist:"Halo" album:"Wrong Album"',
            'track:"Halo" artist:"Beyonce"',
        ]

    @pytest.mark.asyncio
    async def test_simplified_query(self, context, catalog):
        record = make_track("Halo", "Beyonce")
        catalog.on_search("track", "Beyonce - Halo", record)

        track = await Track(context, entry="1. Beyoncé - Halo (4:21)").dispatch()

        assert track.uri == record.uri
        assert catalog.searches == [
            ("track", "1. Beyoncé - Halo (4:21)"),
            ("track", "Beyonce - Halo"),
        ]

    @pytest.mark.asyncio
    async def test_identifier_fallback(self, context, catalog):
        record = catalog.add_track(make_track("Halo", "Beyonce"))

        track = await Track(context, entry=record.id).dispatch()

        assert track.uri == f"spotify:track:{record.id}"
        assert track.name == "Halo"

    @pytest.mark.asyncio
    async def test_not_found_raises(self, context):
        with pytest.raises(EntryNotFoundError) as excinfo:
            await Track(context, entry="∅∅∅unresolvable∅∅∅").dispatch()
        assert excinfo.value.entry == "∅∅∅unresolvable∅∅∅"

    @pytest.mark.asyncio
    async def test_catalog_failure_counts_as_miss(self, catalog):
        record = make_track("Halo", "Beyonce")

        class FlakyCatalog(type(catalog)):
            async def search(self, query, kind):
                if query == "Beyoncé - Halo":
                    raise CatalogError("unavailable")
                return await super().search(query, kind)

        flaky = FlakyCatalog()
        flaky.on_search("track", "Beyonce - Halo", record)
        context = ResolutionContext(catalog=flaky)

        track = await Track(context, entry="Beyoncé - Halo").dispatch()
        assert track.uri == record.uri


class TestKnownIdentifier:
    @pytest.mark.asyncio
    async def test_dispatch_fetches_metadata(self, context, catalog):
        record = catalog.add_track(make_track("Postscript", "Bowery Electric", popularity=30))
        track = Track(context, entry=record.uri, id=record.id, uri=record.uri)

        await track.dispatch()

        assert track.title == "Bowery Electric - Postscript"
        assert track.popularity == 30
        assert catalog.searches == []

    @pytest.mark.asyncio
    async def test_unknown_identifier_is_not_found(self, context):
        track = Track(context, entry="x", id="0" * 22)
        with pytest.raises(EntryNotFoundError):
            await track.dispatch()


class TestProperties:
    def test_uri_is_write_once(self, context):
        track = Track(context, entry="x")
        track.uri = "spotify:track:1"
        track.uri = "spotify:track:1"
        with pytest.raises(AttributeError):
            track.uri = "spotify:track:2"
        assert track.uri == "spotify:track:1"

    @pytest.mark.asyncio
    async def test_popularity_fetched_lazily(self, context, catalog):
        search_hit = make_track("Halo", "Beyonce")
        full = catalog.add_track(
            make_track("Halo", "Beyonce", popularity=77, track_id=search_hit.id)
        )
        catalog.on_search("track", "Beyonce - Halo", search_hit)

        track = Track(context, entry="Beyonce - Halo")
        assert await track.get_property("popularity") == full.popularity

    @pytest.mark.asyncio
    async def test_audio_features_with_complements(self, context, catalog):
        record = catalog.add_track(make_track("Halo", "Beyonce"))
        catalog.features[record.id] = {"energy": 0.75, "tempo": 120.0}
        track = Track(context, entry="x", id=record.id)

        assert await track.get_property("tempo") == 120.0
        assert await track.get_property("unenergy") == pytest.approx(0.25)
        assert track.value_of("undanceability") == pytest.approx(1.0)
        assert catalog.calls.count(("features", record.id)) == 1

    @pytest.mark.asyncio
    async def test_engagement(self, catalog):
        engagement = FakeEngagement({("Beyonce", "Halo"): (1000, 12)})
        context = ResolutionContext(
            catalog=catalog, engagement=engagement, lastfm_user="someone"
        )
        record = catalog.add_track(make_track("Halo", "Beyonce"))
        track = Track(context, entry="x", id=record.id)

        assert await track.get_property("lastfm") == 12
        assert track.global_playcount == 1000
        assert engagement.requests == [("Beyonce", "Halo", "someone")]

    @pytest.mark.asyncio
    async def test_engagement_without_service(self, context, catalog):
        track = Track(context, entry="x", artist="Beyonce", name="Halo")
        assert await track.get_property("lastfm") is None


class TestComparison:
    def make(self, context, record):
        return Track(context, entry="x").apply_record(record)

    def test_apply_record_fields(self, context):
        record = make_track("Halo", "Beyonce", album="I Am", featuring=("Guest",))
        track = self.make(context, record)
        assert track.artists == ["Beyonce", "Guest"]
        assert track.artist == "Beyonce, Guest"
        assert track.main_artist == "Beyonce"
        assert track.album == "I Am"
        assert str(track) == "Beyonce - Halo"

    def test_equals_and_similar_to(self, context):
        record = make_track("Halo", "Beyonce")
        a = self.make(context, record)
        b = self.make(context, record)
        c = self.make(context, make_track("Halo!", "Beyoncé"))
        unresolved = Track(context, entry="x", title="beyonce - halo")
        assert a.equals(b)
        assert a.similar_to(b)
        assert not a.equals(c)
        # distinct URIs are distinct tracks, whatever the titles
        assert not a.similar_to(c)
        assert a.similar_to(unresolved)
        assert unresolved.similar_to(c)

    def test_has_artist(self, context):
        track = self.make(context, make_track("Song", "Main", featuring=("The Guest Band",)))
        assert track.has_artist("guest")
        assert track.has_artist(" MAIN ")
        assert not track.has_artist("other")

    def test_csv_row(self, context):
        track = self.make(context, make_track("Halo", "Beyonce", album="I Am", popularity=50))
        assert track.csv_row() == [
            track.uri, "Halo", "Beyonce", "I Am", 1, 1, 200000, 50, ""
        ]
