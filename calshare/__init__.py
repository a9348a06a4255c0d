"""Company calendar sharing service."""

__version__ = "0.1.0"
