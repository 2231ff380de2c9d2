"""Adapters: wire protocol and export formats."""
