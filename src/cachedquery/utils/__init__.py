"""Utility helpers for cachedquery."""
