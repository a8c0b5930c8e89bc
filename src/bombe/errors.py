class BombeError(Exception):
    """Base class for every failure raised by this package."""


class ResourceError(BombeError):
    """A required file (ciphertext, trigram corpus) is missing or unreadable."""


class ConfigurationError(BombeError, ValueError):
    """Malformed machine setting: rotor, reflector, ring, position or plugboard."""


class InvalidSymbolError(BombeError, ValueError):
    """Text contains a symbol outside the machine alphabet."""


class DegenerateInputError(BombeError, ValueError):
    """Ciphertext too short to be scored."""
