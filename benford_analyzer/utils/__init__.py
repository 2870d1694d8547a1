"""Shared helpers for paths and JSON serialization."""
