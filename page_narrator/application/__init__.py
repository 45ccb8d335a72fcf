"""Application layer for the page narrator."""
