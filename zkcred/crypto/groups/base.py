"""
Group capability interface.

Commitments and the representation-proof engine are written against
``Group`` only. A group whose order is hidden from provers reports
``order`` as ``None``; callers must then use integer (non-modular)
exponent arithmetic.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional, Sequence

from ..security import int_to_bytes


class Group(ABC):
    """Multiplicatively written abelian group."""

    @property
    @abstractmethod
    def order(self) -> Optional[int]:
        """Public group order, or None when it is hidden."""

    @property
    @abstractmethod
    def modulus_bit_length(self) -> int:
        """Bit length of the modulus elements are reduced by."""

    @abstractmethod
    def identity(self) -> Any:
        pass

    @abstractmethod
    def multiply(self, a: Any, b: Any) -> Any:
        pass

    @abstractmethod
    def exponentiate(self, base: Any, exponent: int) -> Any:
        """``base^exponent``; negative exponents invert the base."""

    @abstractmethod
    def invert(self, a: Any) -> Any:
        pass

    @abstractmethod
    def random_element(self) -> Any:
        pass

    @abstractmethod
    def is_member(self, a: Any) -> bool:
        pass

    def element_to_bytes(self, a: Any) -> bytes:
        """Canonical encoding used for Fiat-Shamir hashing."""
        return int_to_bytes(a)

    def divide(self, a: Any, b: Any) -> Any:
        return self.multiply(a, self.invert(b))

    def multi_exponentiate(self, bases: Sequence[Any], exponents: Sequence[int]) -> Any:
        """``Π bases_i^exponents_i``."""
        if len(bases) != len(exponents):
            raise ValueError("bases and exponents must have the same length")
        result = self.identity()
        for base, exponent in zip(bases, exponents):
            result = self.multiply(result, self.exponentiate(base, exponent))
        return result
