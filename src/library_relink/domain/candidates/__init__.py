"""Candidate domain - the new audio files tracks can be remapped to."""

from .index import CandidateIndex, ScoredCandidate
from .models import CandidateFile
from .scanner import scan_candidates

__all__ = ["CandidateFile", "CandidateIndex", "ScoredCandidate", "scan_candidates"]
