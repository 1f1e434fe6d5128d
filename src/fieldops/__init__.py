"""fieldops: generic REST resource clients for the field-operations backend."""

__version__ = "0.1.0"
