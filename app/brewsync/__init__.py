"""brewsync - keep Brewfile-style package manifests in sync across machines."""

__version__ = "0.1.0"
