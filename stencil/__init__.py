"""Stencil - declarative project scaffolding."""

__version__ = "1.0.0"
