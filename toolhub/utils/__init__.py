"""Utility helpers for toolhub."""
