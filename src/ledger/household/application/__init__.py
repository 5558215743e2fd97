"""Application layer for household data."""
