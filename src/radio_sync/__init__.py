"""radio-sync: a synchronized radio playback scheduler."""

__version__ = "0.1.0"
