"""Auth entities."""
