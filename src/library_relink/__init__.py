"""Library Relink - remap DJ collection track locations onto a new set of audio files."""

__version__ = "0.1.0"
