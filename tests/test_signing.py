"""Integrity signature and reference generation."""

import hashlib
import re

from cardpay.common.signing import generate_transaction_reference, generate_transaction_signature


def test_signature_is_sha256_of_concatenated_fields():
    expected = hashlib.sha256("REF-ABC10000COPsecret".encode("utf-8")).hexdigest()

    assert generate_transaction_signature("REF-ABC", 10000, "COP", "secret") == expected


def test_signature_is_deterministic():
    first = generate_transaction_signature("REF-1", 2500, "COP", "s3cr3t")
    second = generate_transaction_signature("REF-1", 2500, "COP", "s3cr3t")

    assert first == second
    assert len(first) == 64


def test_signature_changes_with_amount_or_secret():
    base = generate_transaction_signature("REF-1", 2500, "COP", "s3cr3t")

    assert generate_transaction_signature("REF-1", 2501, "COP", "s3cr3t") != base
    assert generate_transaction_signature("REF-1", 2500, "COP", "other") != base


def test_references_are_unique():
    references = [generate_transaction_reference() for _ in range(1000)]

    assert len(set(references)) == 1000


def test_reference_format():
    assert re.fullmatch(r"REF-[0-9A-Z]+-[0-9A-Z]{8}", generate_transaction_reference())
