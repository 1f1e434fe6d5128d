"""Domain models and entities.

Pure data structures (Pydantic v2) plus the error taxonomy. The domain knows
nothing about HTTP or the CLI.
"""
