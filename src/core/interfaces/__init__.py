"""Core interfaces/abstractions.

Why:
- Defines contracts (Protocol) that concrete adapters implement.
- Services depend on the contract, so tests can hand them a fake client.
"""
