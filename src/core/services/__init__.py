"""Lookup orchestration services."""
