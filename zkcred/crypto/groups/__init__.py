"""Group implementations behind the ``Group`` capability interface."""

from .base import Group
from .ec import ECGroup
from .qr_special_rsa import QRSpecialRSA
from .schnorr import SchnorrGroup

__all__ = ["Group", "SchnorrGroup", "QRSpecialRSA", "ECGroup"]
