"""
Tests for raw credentials and attribute conversion.
"""

import pytest

from zkcred.cl.attributes import Attribute, RawCredential, Visibility
from zkcred.crypto.exceptions import ConfigurationError, DomainError


STRUCTURE = [
    {"index": 0, "name": "Name", "type": "string", "visibility": "known"},
    {"index": 1, "name": "Gender", "type": "string", "visibility": "known"},
    {"index": 2, "name": "Age", "type": "int", "visibility": "committed"},
]


# ============================================================================
# ATTRIBUTE
# ============================================================================


class TestAttribute:
    def test_string_value(self):
        """Strings map to the big-endian integer of their UTF-8 bytes."""
        attr = Attribute(0, "Name", "string", Visibility.KNOWN)
        attr.set_value("Jack")
        assert attr.to_int() == int.from_bytes(b"Jack", "big")
        assert attr.display_value() == "Jack"

    def test_unicode_string(self):
        attr = Attribute(0, "City", "string", "known")
        attr.set_value("Zürich")
        assert attr.display_value() == "Zürich"

    def test_int_value(self):
        attr = Attribute(0, "Age", "int", "committed")
        attr.set_value("122")
        assert attr.to_int() == 122
        assert attr.display_value() == "122"
        assert attr.visibility is Visibility.COMMITTED

    def test_int_rejects_text(self):
        attr = Attribute(0, "Age", "int", "committed")
        with pytest.raises(DomainError):
            attr.set_value("old")

    def test_unset_value(self):
        with pytest.raises(DomainError):
            Attribute(0, "Age", "int", "hidden").to_int()

    def test_unsupported_type(self):
        with pytest.raises(ConfigurationError):
            Attribute(0, "Photo", "bytes", "known")

    def test_unknown_visibility(self):
        with pytest.raises(ValueError):
            Attribute(0, "Age", "int", "public")


# ============================================================================
# RAW CREDENTIAL
# ============================================================================


class TestRawCredential:
    @pytest.fixture
    def cred(self):
        cred = RawCredential.from_structure(STRUCTURE)
        cred.set_values({"Name": "Jack", "Gender": "M", "Age": "122"})
        return cred

    def test_values_by_visibility(self, cred):
        assert cred.get_known_values() == [
            int.from_bytes(b"Jack", "big"),
            int.from_bytes(b"M", "big"),
        ]
        assert cred.get_committed_values() == [122]
        assert cred.get_hidden_values() == []
        assert cred.counts() == {"known": 2, "committed": 1, "hidden": 0}

    def test_attribute_values(self, cred):
        assert cred.get_attribute_values() == {0: "Jack", 1: "M", 2: "122"}

    def test_update_value(self, cred):
        cred.update_value("Name", "John")
        assert cred.get_attribute_values()[0] == "John"

    def test_class_indices(self, cred):
        """Indices count within the visibility class, not the whole structure."""
        assert cred.known_index("Gender") == 1
        assert cred.committed_index("Age") == 0
        with pytest.raises(DomainError):
            cred.known_index("Age")

    def test_unknown_name(self, cred):
        with pytest.raises(DomainError):
            cred.update_value("Height", "180")

    def test_describe_omits_values(self, cred):
        assert cred.describe() == STRUCTURE

    def test_add_attribute(self):
        cred = RawCredential()
        cred.add_attribute("Name", "string", "known", "Jack")
        cred.add_attribute("Age", "int", "committed", 122)
        assert len(cred) == 2
        assert cred.get_committed_values() == [122]

    def test_duplicate_name(self):
        cred = RawCredential()
        cred.insert_attribute("Name", "string", "known")
        with pytest.raises(ConfigurationError):
            cred.insert_attribute("Name", "string", "hidden")

    @pytest.mark.parametrize(
        "structure",
        [
            [{"index": 1, "name": "Name", "type": "string", "visibility": "known"}],
            [{"index": 0, "type": "string", "visibility": "known"}],
            [{"index": 0, "name": "Name", "type": "string", "visibility": "public"}],
            [{"index": "zero", "name": "Name", "type": "string", "visibility": "known"}],
            ["Name"],
        ],
    )
    def test_bad_structure(self, structure):
        with pytest.raises(ConfigurationError):
            RawCredential.from_structure(structure)

    def test_structure_index_defaults_to_position(self):
        cred = RawCredential.from_structure(
            [{"name": "Name", "type": "string", "visibility": "known"}]
        )
        assert cred.get_attribute("Name").index == 0
