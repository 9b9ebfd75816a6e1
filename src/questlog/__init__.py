"""Questlog: gamified task tracking API and client."""

__version__ = "0.1.0"
