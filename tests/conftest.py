"""Shared fixtures: a small Rekordbox collection export."""

import sys

import pytest
from loguru import logger

from library_relink.domain.candidates.models import CandidateFile
from library_relink.domain.descriptor.parser import parse_descriptor

SAMPLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<DJ_PLAYLISTS Version="1.0.0">
  <PRODUCT Name="rekordbox" Version="6.8.2" Company="AlphaTheta"/>
  <COLLECTION Entries="3">
    <TRACK TrackID="1" Name="One More Time" Artist="Daft Punk" Album="Discovery" Kind="FLAC File" BitRate="1411" TotalTime="320" AverageBpm="122.70" Location="file://localhost/Users/dj/old/dpt.flac">
      <TEMPO Inizio="0.050" Bpm="122.70" Metro="4/4" Battito="1"/>
      <POSITION_MARK Name="Drop" Type="0" Start="60.100" Num="0"/>
    </TRACK>
    <TRACK TrackID="2" Name="Windowlicker" Artist="Aphex Twin" Album="" BitRate="320" TotalTime="367" AverageBpm="127.00" Location="file://localhost/Users/dj/old/Aphex%20Twin%20-%20Windowlicker.mp3"/>
    <TRACK TrackID="3" Name="Teachers" Artist="Daft Punk" Album="Homework" BitRate="192" Location='file://localhost/Users/dj/old/teachers.mp3' Comments="intro > outro &amp; more"/>
  </COLLECTION>
  <PLAYLISTS>
    <NODE Type="0" Name="ROOT" Count="1">
      <NODE Name="Set" Type="1" KeyType="0" Entries="2">
        <TRACK Key="1"/>
        <TRACK Key="3"/>
      </NODE>
    </NODE>
  </PLAYLISTS>
</DJ_PLAYLISTS>
"""

NEW_BASE = "file://localhost/Users/dj/new"


@pytest.fixture
def sample_xml() -> str:
    return SAMPLE_XML


@pytest.fixture
def sample_descriptor():
    result = parse_descriptor(SAMPLE_XML)
    assert result.ok
    return result.descriptor


@pytest.fixture
def sample_candidates() -> list[CandidateFile]:
    return [
        CandidateFile.from_relative_path("Daft Punk - One More Time.flac"),
        CandidateFile.from_relative_path("Electronic/Aphex Twin - Windowlicker.mp3"),
        CandidateFile.from_relative_path("Electronic/Windowlicker (Live).mp3"),
        CandidateFile.from_relative_path("misc/unrelated.wav"),
    ]


@pytest.fixture(autouse=True)
def reset_loguru():
    """Drop any sinks a test added (e.g. through setup_loguru)."""
    yield
    logger.remove()
    logger.add(sys.stderr)
