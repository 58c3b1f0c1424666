"""Heuristic header matching."""
