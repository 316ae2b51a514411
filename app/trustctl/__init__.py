"""trustctl - Trust-store synchronization for a file-access policy daemon."""

__version__ = "0.1.0"
