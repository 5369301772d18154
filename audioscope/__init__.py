"""Audioscope - decode an audio file, look at its spectrum, read what was said."""

__version__ = "0.1.0"
