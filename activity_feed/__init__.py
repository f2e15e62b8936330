"""Activity journal feed: recent activity from a few APIs, served as RSS."""

__version__ = "1.0.0"
