"""Evict least-recently-accessed files until a volume has enough free space."""

__version__ = "0.1.0"
