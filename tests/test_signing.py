import json

import pytest
from conftest import CALLBACK_URL, CURRENT_KEY, NEXT_KEY, sign

from jobrelay.v1.core.exceptions import AuthenticationError, ConfigurationError
from jobrelay.v1.core.signing import SignatureVerifier, body_digest

BODY = json.dumps({"jobId": "3f0c8a52-2a5e-4c0e-9d59-0d8f4c1f7a10"}).encode()


@pytest.fixture
def verifier():
    return SignatureVerifier(CURRENT_KEY, NEXT_KEY)


def test_current_key_accepted(verifier):
    claims = verifier.verify(sign(BODY), BODY, CALLBACK_URL)

    assert claims["sub"] == CALLBACK_URL
    assert claims["iss"] == "Upstash"


def test_next_key_accepted_while_current_configured(verifier):
    """Signatures from the rotated-in key verify before the cutover."""
    claims = verifier.verify(sign(BODY, key=NEXT_KEY), BODY, CALLBACK_URL)

    assert claims["sub"] == CALLBACK_URL


def test_unknown_key_rejected(verifier):
    with pytest.raises(AuthenticationError):
        verifier.verify(sign(BODY, key="someone-else"), BODY, CALLBACK_URL)


def test_altered_body_rejected(verifier):
    signature = sign(BODY)
    tampered = BODY.replace(b"3f0c", b"4f0c")

    with pytest.raises(AuthenticationError) as exc_info:
        verifier.verify(signature, tampered, CALLBACK_URL)
    assert "body hash" in exc_info.value.details["reason"]


def test_whitespace_change_rejected(verifier):
    """Re-serialized JSON is not the body that was signed."""
    signature = sign(BODY)
    reformatted = json.dumps(json.loads(BODY), indent=2).encode()

    with pytest.raises(AuthenticationError):
        verifier.verify(signature, reformatted, CALLBACK_URL)


def test_different_url_rejected(verifier):
    signature = sign(BODY, url="https://elsewhere.test/v1/jobs/worker")

    with pytest.raises(AuthenticationError) as exc_info:
        verifier.verify(signature, BODY, CALLBACK_URL)
    assert "url" in exc_info.value.details["reason"]


def test_expired_signature_rejected(verifier):
    signature = sign(BODY, expires_in=-60)

    with pytest.raises(AuthenticationError):
        verifier.verify(signature, BODY, CALLBACK_URL)


def test_clock_tolerance_allows_recent_expiry():
    verifier = SignatureVerifier(CURRENT_KEY, clock_tolerance_s=120)

    claims = verifier.verify(sign(BODY, expires_in=-60), BODY, CALLBACK_URL)

    assert claims["sub"] == CALLBACK_URL


def test_wrong_issuer_rejected(verifier):
    with pytest.raises(AuthenticationError):
        verifier.verify(sign(BODY, iss="Someone"), BODY, CALLBACK_URL)


def test_garbage_signature_rejected(verifier):
    with pytest.raises(AuthenticationError):
        verifier.verify("not-a-jwt", BODY, CALLBACK_URL)


def test_empty_signature_rejected(verifier):
    with pytest.raises(AuthenticationError, match="Missing"):
        verifier.verify("", BODY, CALLBACK_URL)


def test_no_keys_is_configuration_error():
    verifier = SignatureVerifier(None, None)

    with pytest.raises(ConfigurationError):
        verifier.verify(sign(BODY), BODY, CALLBACK_URL)


def test_body_digest_is_unpadded_base64url():
    digest = body_digest(b"")

    assert digest == "47DEQpj8HBSa-_TImW-5JCeuQeRkm5NMpJWZG3hSuFU"
    assert "=" not in digest
