"""Generative flowers arranged into an ikebana composition."""

__version__ = "0.1.0"
