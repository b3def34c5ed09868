"""Recall source tree."""
