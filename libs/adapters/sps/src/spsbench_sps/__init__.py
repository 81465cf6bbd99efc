"""Structure-preserving signature adapters.

Importing this package registers the schemes with `spsbench.registry`.
"""

from .groth15 import Groth15G1, Groth15G2, Groth15Instance, Groth15PublicParameters

__all__ = ["Groth15G1", "Groth15G2", "Groth15Instance", "Groth15PublicParameters"]
