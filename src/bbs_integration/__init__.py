"""Bitbucket Server integration: URL resolution, file access and prebuild webhooks."""

__version__ = "0.1.0"
