"""Pinboard: desktop client for a Supabase-backed image-sharing board."""

__version__ = "0.3.0"
