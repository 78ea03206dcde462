"""
zkcred toolkit: anonymous credentials over zero-knowledge proofs.

⚠️ DRAFT — requires crypto review before production use
"""

__version__ = "0.1.0"
