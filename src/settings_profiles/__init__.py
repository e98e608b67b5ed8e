"""Switch between named snapshots of an application's config files."""

__version__ = "0.1.0"
