"""Core: domain models, configuration, interfaces and services."""
