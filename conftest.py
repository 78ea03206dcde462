"""Shared fixtures: CL parameters, issuer keys and a holder."""

import pytest

from zkcred.cl.attributes import RawCredential
from zkcred.cl.cred_manager import CredManager, generate_master_secret
from zkcred.cl.keys import generate_keys
from zkcred.cl.org import Org
from zkcred.cl.params import default_params
from zkcred.cl.records import InMemoryRecordStore
from zkcred.network.protocol import ClService

TEST_STRUCTURE = [
    {"index": 0, "name": "Name", "type": "string", "visibility": "known"},
    {"index": 1, "name": "Gender", "type": "string", "visibility": "known"},
    {"index": 2, "name": "Age", "type": "int", "visibility": "committed"},
    {"index": 3, "name": "Pin", "type": "int", "visibility": "hidden"},
]

TEST_VALUES = {"Name": "Jack", "Gender": "M", "Age": "122", "Pin": "4321"}


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "network: libp2p round trips (set RUN_NETWORK_TESTS=1 to enable)"
    )


def make_raw_credential(values=None):
    raw = RawCredential.from_structure(TEST_STRUCTURE)
    raw.set_values(values or TEST_VALUES)
    return raw


@pytest.fixture(scope="session")
def cl_params():
    """Two known, one committed and one hidden attribute; smaller nym group."""
    return default_params(2, 1, 1, overrides={"pedersen_modulus_bit_len": 1024})


@pytest.fixture(scope="session")
def cl_keys(cl_params):
    return generate_keys(cl_params)


@pytest.fixture
def record_store():
    return InMemoryRecordStore()


@pytest.fixture
def org(cl_params, cl_keys, record_store):
    pub_key, sec_key = cl_keys
    return Org(cl_params, pub_key, sec_key, record_store=record_store)


@pytest.fixture
def raw_credential():
    return make_raw_credential()


@pytest.fixture
def manager(cl_params, cl_keys, raw_credential):
    pub_key, _ = cl_keys
    return CredManager.from_raw_credential(
        cl_params, pub_key, generate_master_secret(pub_key), raw_credential
    )


@pytest.fixture
def issued(org, manager):
    """Credential issued to ``manager`` and accepted by it."""
    request = manager.get_credential_request(org.get_credential_issue_nonce())
    result = org.issue_credential(request)
    assert manager.verify_credential(result.cred, result.a_proof)
    return result


@pytest.fixture
def credential_structure():
    return [dict(entry) for entry in TEST_STRUCTURE]


@pytest.fixture
def service(cl_params, cl_keys, record_store, credential_structure):
    pub_key, sec_key = cl_keys
    return ClService(
        cl_params,
        pub_key,
        sec_key,
        record_store=record_store,
        structure=credential_structure,
        acceptable_credentials={"org1": [0, 1]},
    )
