"""Remote MCP access to a Day One journal through a local CLI bridge."""

from __future__ import annotations

__version__ = "1.0.0"

from .dayone import DayOneClient
from .models import Action, Entry, Journal

__all__ = ["__version__", "Action", "DayOneClient", "Entry", "Journal"]
