"""Validator performance and bandwidth quota monitoring."""

__version__ = "0.1.0"
