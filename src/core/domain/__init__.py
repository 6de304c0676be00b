"""Domain models and entities.

Why:
- Pure, strict data structures live here (Pydantic v2).
- The domain knows nothing about HTTP, the CLI or provider SDKs.
"""
