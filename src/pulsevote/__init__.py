"""PulseVote community polling service."""

__version__ = "0.1.0"
