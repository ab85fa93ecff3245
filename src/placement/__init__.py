"""Rank students by exam score and place them into capacity-limited study tracks."""

__version__ = "0.3.0"
