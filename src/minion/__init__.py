"""Minion: knowledge skill pipeline for security and compliance teams.

This package provides:
- SSRF-checked source fetching and HTML-to-text extraction
- Claude-backed drafting, coherence, volume and placement analysis of skills
- Git sync of skills, customers, templates and prompt blocks
"""

__version__ = "0.1.0"

# Re-export commonly used utilities
from minion.errors import MinionError
from minion.io import (
    ensure_parent_dir,
    read_file,
    read_json,
    write_file,
)
from minion.logging import get_logger

__all__ = [
    "MinionError",
    "ensure_parent_dir",
    "get_logger",
    "read_file",
    "read_json",
    "write_file",
]
