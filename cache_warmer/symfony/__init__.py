"""Collaborators that talk to the project's Symfony console."""

from . import console

__all__ = ["console"]
