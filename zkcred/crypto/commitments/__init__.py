"""Pedersen and Damgård–Fujisaki commitment schemes."""

from .damgard_fujisaki import DamgardFujisakiCommitter, DamgardFujisakiReceiver
from .pedersen import PedersenCommitter, PedersenParams, PedersenReceiver

__all__ = [
    "PedersenParams",
    "PedersenCommitter",
    "PedersenReceiver",
    "DamgardFujisakiCommitter",
    "DamgardFujisakiReceiver",
]
