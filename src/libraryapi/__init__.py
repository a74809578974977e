"""Library management backend: catalog, loans and overdue notices."""

__version__ = "0.1.0"
