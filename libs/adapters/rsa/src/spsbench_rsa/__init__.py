"""RSA baseline adapter (registers ``rsa-pss`` on import)."""

from .rsa_adapter import RSAPSS, RSAPSSInstance

__all__ = ["RSAPSS", "RSAPSSInstance"]
