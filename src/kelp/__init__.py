"""Kelp: tokenizer, parser and editor tooling for the Kelp scripting language."""

__version__ = "0.1.0"
