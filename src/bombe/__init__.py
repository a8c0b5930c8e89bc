"""Ciphertext-only key recovery for rotor cipher machines."""

__version__ = "0.1.0"
