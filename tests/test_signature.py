"""Tests for HMAC digest computation, comparison and header parsing."""

import hashlib
import hmac

import pytest

from pubsubhub.exceptions import Forbidden, UnsupportedAlgorithmError
from pubsubhub.signature import (
    SUPPORTED_ALGORITHMS,
    StreamingDigest,
    compare,
    digest,
    parse_signature_header,
    sign_payload,
)


def test_digest_matches_hmac_sha1():
    expected = hmac.new(b"abc", b"hello world", hashlib.sha1).hexdigest()
    assert digest("sha1", "abc", [b"hello world"]) == expected


def test_streaming_digest_equals_one_shot():
    """Feeding chunks incrementally gives the same digest as one update."""
    chunks = [b"<feed>", b"<entry/>", b"", b"</feed>"]
    ctx = StreamingDigest("sha256", "s3cret")
    for chunk in chunks:
        ctx.update(chunk)
    expected = hmac.new(b"s3cret", b"".join(chunks), hashlib.sha256).hexdigest()
    assert ctx.hexdigest() == expected


def test_algorithm_name_is_case_insensitive():
    assert StreamingDigest("SHA512", "k").algorithm == "sha512"


@pytest.mark.parametrize("algorithm", ["md5", "whirlpool", "", "shake_128"])
def test_unsupported_algorithm_raises_forbidden(algorithm):
    with pytest.raises(UnsupportedAlgorithmError) as exc_info:
        StreamingDigest(algorithm, "k")
    assert isinstance(exc_info.value, Forbidden)
    assert exc_info.value.status_code == 403


def test_supported_algorithms_are_sha_family():
    assert SUPPORTED_ALGORITHMS == {"sha1", "sha224", "sha256", "sha384", "sha512"}


def test_compare_ignores_case():
    sig = sign_payload(b"payload", "abc")
    assert compare(sig.upper(), sig) is True
    assert compare(sig, sig.upper()) is True


def test_compare_rejects_mismatch_and_empty():
    sig = sign_payload(b"payload", "abc")
    assert compare(sign_payload(b"payload", "other"), sig) is False
    assert compare("", sig) is False
    assert compare(None, sig) is False


def test_matches_uses_final_digest():
    ctx = StreamingDigest("sha1", "abc")
    ctx.update(b"body")
    assert ctx.matches(sign_payload(b"body", "abc")) is True


def test_sign_payload_defaults_to_sha1():
    assert sign_payload(b"x", "k") == hmac.new(b"k", b"x", hashlib.sha1).hexdigest()


def test_parse_signature_header():
    assert parse_signature_header("SHA256=ABCDEF") == ("sha256", "abcdef")


def test_parse_signature_header_without_equals_has_empty_signature():
    assert parse_signature_header("sha1") == ("sha1", "")
    assert parse_signature_header("") == ("", "")
