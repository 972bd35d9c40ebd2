"""Concrete implementations of the domain ports."""
