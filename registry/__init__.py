"""File identity and ownership registry."""
