"""Anti-replay sealing service for client-submitted profile results."""

__version__ = "2.2.0"
