"""Muza accounts service: profiles, email verification and purchases."""

__version__ = "0.1.0"
