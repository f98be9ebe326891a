"""Wellness journal: three daily check-ins, mirrored live per signed-in user."""

__version__ = "0.1.0"
