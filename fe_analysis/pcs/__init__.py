"""Presence-condition detection."""
