"""Authentication and authorization core of the retail management backend."""

__version__ = "0.1.0"
