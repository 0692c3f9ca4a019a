"""Parley Stage: an anonymous, identity-by-address discussion board."""

__version__ = "0.1.0"
