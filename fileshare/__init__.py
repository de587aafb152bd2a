"""Authenticated file sharing API: local disk storage with an optional S3 mirror."""

__version__ = "0.1.0"
