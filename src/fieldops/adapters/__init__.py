"""Adapters: concrete I/O behind the core interfaces (HTTP, token storage, export)."""
