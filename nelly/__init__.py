"""A small scripting language for describing git repository setup."""

__version__ = "0.1.0"