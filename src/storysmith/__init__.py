"""Storysmith — user story authoring with an AI review assistant."""

__version__ = "0.1.0"
