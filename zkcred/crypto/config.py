"""
⚠️ DRAFT — requires crypto review before production use

Cryptographic configuration for the credential toolkit.

Protocol bit lengths that issuer and holder must agree on live in
``zkcred.cl.params.Params``. This module only holds constants that are
fixed for a given release: hash selection, domain separators, default
security parameters and the elliptic curve used by ``ECGroup``.
"""

# ============================================================================
# HASH FUNCTIONS
# ============================================================================

# For Fiat-Shamir transform (challenge generation)
HASH_FUNCTION = "SHA3-512"  # NOT SHA-512 (length extension attack)
HASH_OUTPUT_BITS = 512

# For domain separation
DOMAIN_SEPARATOR_PREFIX = b"ZKCRED_V1_"

# Domain separators for each challenge type
DOMAIN_SEPARATORS = {
    "credential_request": DOMAIN_SEPARATOR_PREFIX + b"CRED_REQUEST",
    "issue_credential": DOMAIN_SEPARATOR_PREFIX + b"ISSUE",
    "prove_credential": DOMAIN_SEPARATOR_PREFIX + b"PROVE",
    "df_opening": DOMAIN_SEPARATOR_PREFIX + b"DF_OPENING",
    "key_context": DOMAIN_SEPARATOR_PREFIX + b"KEY_CONTEXT",
}

# ============================================================================
# SECURITY PARAMETERS
# ============================================================================

# Statistical security parameter used when a caller does not pass one
DEFAULT_SEC_PARAM = 80

# Size of interactively chosen challenges
CHALLENGE_SPACE_BITS = 80

# Prime search gives up after this many candidates (SetupError)
MAX_PRIME_SEARCH_ATTEMPTS = 100_000

# Random group element search gives up after this many candidates
MAX_GENERATOR_ATTEMPTS = 1_000

# Randomness source
RANDOMNESS_SOURCE = "secrets.SystemRandom"  # Cryptographically secure

# ============================================================================
# ELLIPTIC CURVE
# ============================================================================

CURVE_NAME = "secp256k1"
CURVE_LIBRARY = "petlib"
CURVE_NID = 714  # OpenSSL NID for secp256k1

# Seed for the nothing-up-my-sleeve second generator on the curve
GENERATOR_H_SEED = b"ZKCRED_V1_GENERATOR_H"

# ============================================================================
# SERIALIZATION
# ============================================================================

SERIALIZATION_FORMAT = "CBOR"
PROOF_VERSION = 1  # Increment for breaking changes
KEY_FILE_VERSION = 1

# ============================================================================
# VALIDATION
# ============================================================================


def validate_config() -> bool:
    """
    Validate configuration parameters.

    Returns:
        True if configuration is valid

    Raises:
        AssertionError: If configuration is invalid
    """
    assert HASH_FUNCTION in ["SHA3-512", "SHA512"], "Invalid hash function"
    assert HASH_OUTPUT_BITS == 512, "Fiat-Shamir hash must produce 512 bits"
    assert DEFAULT_SEC_PARAM >= 40, "Statistical security parameter too small"
    assert CHALLENGE_SPACE_BITS >= 40, "Challenge space too small for soundness"
    assert CURVE_LIBRARY == "petlib", "EC group requires petlib"
    assert MAX_PRIME_SEARCH_ATTEMPTS > 0, "Prime search needs at least one attempt"
    for name, separator in DOMAIN_SEPARATORS.items():
        assert separator.startswith(DOMAIN_SEPARATOR_PREFIX), f"Bad separator {name}"

    return True


# Auto-validate on import
validate_config()
