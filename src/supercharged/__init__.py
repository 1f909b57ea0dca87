"""Supercharged Tasks: rank tasks by value per hour, score completions with an on-time bonus."""

__version__ = "0.1.0"
