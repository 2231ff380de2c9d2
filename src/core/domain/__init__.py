"""Domain models and value objects.

Why:
- Plain, strict data structures (Pydantic v2) plus the error taxonomy.
- The domain knows nothing about sockets or the CLI: only DICT concepts.
"""
