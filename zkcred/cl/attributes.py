"""
Raw credentials: named, typed attributes as the application sees them.

Each attribute has a visibility:
- known: sent to the issuer in the clear
- committed: sent as a Damgård–Fujisaki commitment
- hidden: never sent

The CL layer works on integers; ``Attribute.to_int`` maps strings to the
big-endian integer of their UTF-8 bytes and ints to themselves.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from ..crypto.exceptions import ConfigurationError, DomainError

ATTRIBUTE_TYPES = ("string", "int")


class Visibility(str, Enum):
    KNOWN = "known"
    COMMITTED = "committed"
    HIDDEN = "hidden"


@dataclass
class Attribute:
    index: int
    name: str
    type: str
    visibility: Visibility
    value: Optional[int] = None

    def __post_init__(self) -> None:
        if self.type not in ATTRIBUTE_TYPES:
            raise ConfigurationError(f"attribute type is not supported: {self.type}")
        self.visibility = Visibility(self.visibility)

    def set_value(self, value: Any) -> None:
        """
        Set the value from its application form (str for both types).

        Raises:
            DomainError: If an int attribute gets a non-integer value
        """
        if self.type == "string":
            self.value = int.from_bytes(str(value).encode("utf-8"), "big")
            return
        try:
            self.value = int(value)
        except (TypeError, ValueError) as exc:
            raise DomainError(f"cannot convert attribute {self.name} to int: {value!r}") from exc

    def to_int(self) -> int:
        if self.value is None:
            raise DomainError(f"attribute {self.name} has no value")
        return self.value

    def display_value(self) -> str:
        """Inverse of set_value."""
        value = self.to_int()
        if self.type == "string":
            length = max(1, (value.bit_length() + 7) // 8)
            return value.to_bytes(length, "big").decode("utf-8")
        return str(value)

    def describe(self) -> Dict[str, Any]:
        """Structure entry without the value."""
        return {
            "index": self.index,
            "name": self.name,
            "type": self.type,
            "visibility": self.visibility.value,
        }


class RawCredential:
    """
    Ordered collection of attributes.

    Example:
        >>> cred = RawCredential()
        >>> cred.add_attribute("Name", "string", "known", "Jack")
        >>> cred.add_attribute("Age", "int", "committed", "122")
        >>> cred.get_committed_values()
        [122]
    """

    def __init__(self) -> None:
        self._attributes: List[Attribute] = []
        self._name_to_index: Dict[str, int] = {}

    @classmethod
    def from_structure(cls, structure: Iterable[Dict[str, Any]]) -> "RawCredential":
        """Build an empty credential from structure entries (as from YAML)."""
        cred = cls()
        for position, entry in enumerate(structure):
            try:
                index = int(entry.get("index", position))
                if index != position:
                    raise ConfigurationError("attribute indices must be 0..n-1 in order")
                cred.insert_attribute(entry["name"], entry["type"], entry["visibility"])
            except (KeyError, TypeError, ValueError, AttributeError) as exc:
                raise ConfigurationError(f"invalid credential structure entry: {entry!r}") from exc
        return cred

    def insert_attribute(self, name: str, attr_type: str, visibility: str) -> Attribute:
        if name in self._name_to_index:
            raise ConfigurationError(f"duplicate attribute name: {name}")
        attr = Attribute(len(self._attributes), name, attr_type, Visibility(visibility))
        self._attributes.append(attr)
        self._name_to_index[name] = attr.index
        return attr

    def add_attribute(self, name: str, attr_type: str, visibility: str, value: Any) -> Attribute:
        attr = self.insert_attribute(name, attr_type, visibility)
        attr.set_value(value)
        return attr

    def get_attributes(self) -> List[Attribute]:
        return list(self._attributes)

    def get_attribute(self, name: str) -> Attribute:
        try:
            return self._attributes[self._name_to_index[name]]
        except KeyError as exc:
            raise DomainError(f"unknown attribute: {name}") from exc

    def set_values(self, values: Dict[str, Any]) -> None:
        """Set values by attribute name."""
        for name, value in values.items():
            self.get_attribute(name).set_value(value)

    def update_value(self, name: str, value: Any) -> None:
        self.get_attribute(name).set_value(value)

    def get_attribute_values(self) -> Dict[int, str]:
        return {a.index: a.display_value() for a in self._attributes if a.value is not None}

    def _values(self, visibility: Visibility) -> List[int]:
        return [a.to_int() for a in self._attributes if a.visibility is visibility]

    def get_known_values(self) -> List[int]:
        return self._values(Visibility.KNOWN)

    def get_committed_values(self) -> List[int]:
        return self._values(Visibility.COMMITTED)

    def get_hidden_values(self) -> List[int]:
        return self._values(Visibility.HIDDEN)

    def counts(self) -> Dict[str, int]:
        return {
            v.value: sum(1 for a in self._attributes if a.visibility is v) for v in Visibility
        }

    def known_index(self, name: str) -> int:
        """Position of a known attribute among the known attributes."""
        return self._class_index(name, Visibility.KNOWN)

    def committed_index(self, name: str) -> int:
        """Position of a committed attribute among the committed attributes."""
        return self._class_index(name, Visibility.COMMITTED)

    def _class_index(self, name: str, visibility: Visibility) -> int:
        attr = self.get_attribute(name)
        if attr.visibility is not visibility:
            raise DomainError(f"attribute {name} is not {visibility.value}")
        same_class = [a for a in self._attributes if a.visibility is visibility]
        return same_class.index(attr)

    def describe(self) -> List[Dict[str, Any]]:
        return [a.describe() for a in self._attributes]

    def __len__(self) -> int:
        return len(self._attributes)
