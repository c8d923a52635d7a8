"""Imaging request lifecycle: creation, completion drafts and finalization."""
