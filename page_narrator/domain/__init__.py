"""Domain layer for the page narrator."""
