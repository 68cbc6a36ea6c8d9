"""Data models for the note archiver."""
