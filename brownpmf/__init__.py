"""Brownian dynamics of primitive-model electrolytes and macroions."""

__version__ = "0.1.0"