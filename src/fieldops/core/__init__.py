"""Core: configuration, domain models, interfaces and API services.

The core depends on abstractions (`core.interfaces`); concrete I/O lives in
`fieldops.adapters`.
"""
