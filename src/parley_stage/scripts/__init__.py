"""Operational scripts for Parley Stage."""
