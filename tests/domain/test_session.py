"""Tests for the relink session."""

import xml.etree.ElementTree as ET

import pytest

from library_relink.domain.candidates.models import CandidateFile
from library_relink.domain.errors import ExportPreconditionError, UnknownTrackError
from library_relink.domain.mapping.filters import TrackFilter
from library_relink.domain.mapping.models import MappingStatus
from library_relink.domain.session import DEFAULT_EXPORT_FILENAME, RelinkSession

NEW_BASE = "file://localhost/Users/dj/new"


@pytest.fixture
def session(sample_xml, sample_candidates) -> RelinkSession:
    session = RelinkSession(base_path=NEW_BASE)
    assert session.load_descriptor(sample_xml).ok
    session.load_candidates(sample_candidates)
    return session


class TestLoading:
    """Test descriptor (re)loading."""

    def test_seeds_base_path_from_first_track(self, sample_xml):
        """Without a base path, the first track's folder is used."""
        session = RelinkSession()
        session.load_descriptor(sample_xml)
        assert session.base_path == "/Users/dj/old"

    def test_keeps_explicit_base_path(self, session):
        """An explicit base path is not replaced on load."""
        assert session.base_path == NEW_BASE

    def test_reload_resets_mappings(self, session, sample_xml):
        """Loading again clears mappings and ignores."""
        session.confirm("1", "Daft Punk - One More Time.flac")
        session.ignore("2")
        session.load_descriptor(sample_xml)
        assert session.summary().unmatched == 3

    def test_failed_load_keeps_previous_state(self, session):
        """A failed load changes nothing."""
        session.confirm("1", "Daft Punk - One More Time.flac")
        result = session.load_descriptor("<DJ_PLAYLISTS><COLLECTION>")
        assert not result.ok
        assert session.track_ids == ["1", "2", "3"]
        assert session.status("1") is MappingStatus.MATCHED

    def test_unknown_track(self, session):
        """Unknown ids raise UnknownTrackError."""
        with pytest.raises(UnknownTrackError):
            session.track("99")

    def test_empty_session(self):
        """A fresh session has no tracks to navigate."""
        session = RelinkSession()
        assert session.tracks == ()
        assert session.next_unresolved() is None

    def test_reload_reseeds_suggested_base_path(self, sample_xml):
        """A suggested base path follows the newly loaded descriptor."""
        session = RelinkSession()
        session.load_descriptor(sample_xml)
        session.load_descriptor(sample_xml.replace("/Users/dj/old/", "/Volumes/Crate/"))
        assert session.base_path == "/Volumes/Crate"

    def test_reload_keeps_user_base_path(self, session, sample_xml):
        """A base path set by the caller survives a reload."""
        session.load_descriptor(sample_xml.replace("/Users/dj/old/", "/Volumes/Crate/"))
        assert session.base_path == NEW_BASE

    def test_blank_base_path_hands_back_to_suggestion(self, session, sample_xml):
        """Clearing the base path lets the next load seed it again."""
        session.set_base_path("")
        session.load_descriptor(sample_xml)
        assert session.base_path == "/Users/dj/old"


class TestMutations:
    """Test confirming, ignoring and navigating."""

    def test_confirm_unknown_candidate(self, session):
        """Confirming a path that was not loaded raises KeyError."""
        with pytest.raises(KeyError):
            session.confirm("1", "missing.mp3")

    def test_confirm_unknown_track(self, session):
        """Confirming an unknown track raises UnknownTrackError."""
        with pytest.raises(UnknownTrackError):
            session.confirm("99", "misc/unrelated.wav")

    def test_confirm_and_advance(self, session):
        """Confirming moves focus to the next unmatched track."""
        session.ignore("2")
        assert session.confirm_and_advance("1", "Daft Punk - One More Time.flac") == "3"
        assert session.confirm_and_advance("3", "misc/unrelated.wav") is None

    def test_ignore_and_unignore(self, session):
        """Ignore and unignore move a track between statuses."""
        session.confirm("1", "Daft Punk - One More Time.flac")
        session.ignore("1")
        assert session.status("1") is MappingStatus.IGNORED
        session.unignore("1")
        assert session.status("1") is MappingStatus.UNMATCHED

    def test_clear_keeps_descriptor(self, session):
        """Clear resets state but keeps the tracks."""
        session.confirm("1", "Daft Punk - One More Time.flac")
        session.clear()
        assert session.summary().unmatched == 3
        assert len(session.tracks) == 3

    def test_set_base_path_re_resolves(self, session):
        """Existing mappings follow a base path change."""
        session.confirm("1", "Daft Punk - One More Time.flac")
        session.set_base_path("C:/Music")
        assert session.mapping.get("1").resolved_location == (
            "file://C:/Music/Daft%20Punk%20-%20One%20More%20Time.flac"
        )


class TestQueries:
    """Test suggestion and filter queries."""

    def test_suggestions(self, session):
        """The best candidate comes first."""
        top = session.suggestions("2", k=5)
        assert top[0].candidate.relative_path == "Electronic/Aphex Twin - Windowlicker.mp3"

    def test_ranked_with_extension_filter(self, session):
        """The extension filter narrows the ranking."""
        ranked = session.ranked("2", extension="wav")
        assert [item.candidate.relative_path for item in ranked] == ["misc/unrelated.wav"]

    def test_filtered_tracks(self, session):
        """Tracks can be filtered by status."""
        session.ignore("3")
        tracks = session.filtered_tracks(TrackFilter(status=MappingStatus.IGNORED))
        assert [t.id for t in tracks] == ["3"]


class TestAutoMatch:
    """Test confirming top suggestions above a threshold."""

    def test_threshold(self, session):
        """Only tracks whose best score reaches the threshold match."""
        created = session.auto_match(0.8)
        assert [m.track_id for m in created] == ["1", "2"]
        assert session.status("3") is MappingStatus.UNMATCHED

    def test_lower_threshold_matches_more(self, session):
        """A lower threshold matches more tracks."""
        created = session.auto_match(0.5)
        assert [m.track_id for m in created] == ["1", "2", "3"]

    def test_skips_resolved_tracks(self, session):
        """Ignored and matched tracks are left alone."""
        session.ignore("1")
        session.confirm("2", "misc/unrelated.wav")
        created = session.auto_match(0.0)
        assert [m.track_id for m in created] == ["3"]
        assert session.mapping.get("2").relative_path == "misc/unrelated.wav"
        assert session.status("1") is MappingStatus.IGNORED

    def test_undecodable_file_name_does_not_abort(self, sample_xml):
        """A file name with non-UTF-8 bytes is matched and encoded as raw bytes."""
        name = b"Daft Punk - One More Time \xe9.flac".decode("utf-8", "surrogateescape")
        session = RelinkSession(base_path="/Music")
        session.load_descriptor(sample_xml)
        session.load_candidates([CandidateFile.from_relative_path(name)])

        created = session.auto_match(0.8)
        assert [m.track_id for m in created] == ["1"]
        assert created[0].resolved_location == (
            "file://localhost/Music/Daft%20Punk%20-%20One%20More%20Time%20%E9.flac"
        )
        assert "%E9.flac" in session.export()


class TestExport:
    """Test exporting through the session."""

    def test_scenario_single_track(self):
        """A zero-score candidate can still be confirmed and exported."""
        xml = (
            '<DJ_PLAYLISTS><COLLECTION><TRACK TrackID="1" Name="One More Time" '
            'Artist="Daft Punk" Location="file://localhost/Users/dj/old/dpt.flac"/>'
            "</COLLECTION></DJ_PLAYLISTS>"
        )
        session = RelinkSession(base_path=NEW_BASE)
        session.load_descriptor(xml)
        session.load_candidates([CandidateFile.from_relative_path("dpt_remaster.flac")])

        assert session.ranked("1")[0].score == 0.0
        mapping = session.confirm("1", "dpt_remaster.flac")
        assert mapping.resolved_location == "file://localhost/Users/dj/new/dpt_remaster.flac"

        output = session.export()
        track = ET.fromstring(output).find("COLLECTION/TRACK")
        assert track.attrib == {
            "TrackID": "1",
            "Name": "One More Time",
            "Artist": "Daft Punk",
            "Location": "file://localhost/Users/dj/new/dpt_remaster.flac",
        }

    def test_export_without_descriptor(self):
        """Export before loading is refused."""
        with pytest.raises(ExportPreconditionError):
            RelinkSession(base_path=NEW_BASE).export()

    def test_export_without_base_path(self, session):
        """Export with a blank base path is refused."""
        session.set_base_path(" ")
        with pytest.raises(ExportPreconditionError):
            session.export()

    def test_export_to_directory_uses_default_name(self, session, tmp_path):
        """A directory target gets the default file name."""
        session.auto_match(0.8)
        written = session.export_to(tmp_path)
        assert written == tmp_path / DEFAULT_EXPORT_FILENAME
        assert "Aphex%20Twin%20-%20Windowlicker.mp3" in written.read_text(encoding="utf-8")

    def test_export_to_file(self, session, tmp_path):
        """A file target is written as given."""
        target = tmp_path / "out" / "relinked.xml"
        assert session.export_to(target) == target
        assert target.exists()

    def test_failed_export_writes_nothing(self, session, tmp_path):
        """A refused export leaves no file behind."""
        session.set_base_path("")
        with pytest.raises(ExportPreconditionError):
            session.export_to(tmp_path)
        assert list(tmp_path.iterdir()) == []
