"""
End-to-end credential lifecycle: issue, update, present.

⚠️ DRAFT — requires crypto review before production use
"""

from zkcred.cl import Org


def _present(org, manager, cred, known_idx, committed_idx):
    nonce = org.get_prove_cred_nonce()
    rcred, proof = manager.build_proof(cred, known_idx, committed_idx, nonce)
    result = org.prove_cred(
        rcred.a,
        proof,
        known_idx,
        committed_idx,
        [manager.known_attrs[i] for i in known_idx],
        [manager.commitments_of_attrs[i] for i in committed_idx],
    )
    return rcred, result


def test_credential_lifecycle(org, manager, raw_credential, record_store):
    """Jack/M/122 is issued, renamed to John and presented revealing Gender."""
    issued = org.issue_credential(manager.get_credential_request(org.get_credential_issue_nonce()))
    assert manager.verify_credential(issued.cred, issued.a_proof)
    assert len(record_store) == 1

    raw_credential.update_value("Name", "John")
    nonce = manager.update_known_attrs(raw_credential.get_known_values())
    updated = org.update_credential(manager.nym, nonce, raw_credential.get_known_values())
    assert manager.verify_update(updated.cred, updated.a_proof)
    assert raw_credential.get_attribute_values()[0] == "John"
    assert record_store.get(manager.nym).known_attrs == raw_credential.get_known_values()

    gender = raw_credential.known_index("Gender")
    _, result = _present(org, manager, updated.cred, [gender], [])
    assert result

    # the old credential was signed over Name=Jack
    _, stale = _present(org, manager, issued.cred, [gender], [])
    assert not stale


def test_presentations_are_unlinkable(org, manager, issued):
    first, ok1 = _present(org, manager, issued.cred, [1], [])
    second, ok2 = _present(org, manager, issued.cred, [1], [])
    assert ok1 and ok2
    assert first.a != second.a
    assert first.a != issued.cred.a
    assert first.v11 != second.v11


def test_committed_attribute_disclosure(org, manager, issued):
    _, result = _present(org, manager, issued.cred, [], [0])
    assert result


def test_verifier_without_secret_key(cl_params, cl_keys, manager, issued):
    """Presentations verify against the public key alone."""
    verifier = Org(cl_params, cl_keys[0])
    _, result = _present(verifier, manager, issued.cred, [0, 1], [0])
    assert result
