"""Core type definitions."""

from typing import NewType

# Canonical colon-delimited page address (e.g. "projects:alpha:notes")
# Distinct from raw link text typed by the user
PageId = NewType("PageId", str)
