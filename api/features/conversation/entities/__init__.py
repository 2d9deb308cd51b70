"""Conversation entities."""
