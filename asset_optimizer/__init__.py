"""Transcode oversized public images to WebP and rewrite their references."""

__version__ = "0.1.0"
