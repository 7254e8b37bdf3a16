"""Tests for visitor key derivation."""
import hashlib

from pageviews.domain.analytics.visitor import visitor_key


def test_no_secret_uses_raw_address():
    assert visitor_key("2024-05-17", "10.0.0.1", "") == "10.0.0.1"


def test_secret_key_is_raw_sha256_of_day_address_secret():
    expected = hashlib.sha256(b"2024-05-1710.0.0.1pepper").digest()
    key = visitor_key("2024-05-17", "10.0.0.1", "pepper")
    assert key.encode("latin-1") == expected
    assert key != expected.hex()


def test_secret_key_is_deterministic_within_a_day():
    assert visitor_key("2024-05-17", "10.0.0.1", "pepper") == visitor_key("2024-05-17", "10.0.0.1", "pepper")


def test_secret_key_changes_with_the_day():
    assert visitor_key("2024-05-17", "10.0.0.1", "pepper") != visitor_key("2024-05-18", "10.0.0.1", "pepper")


def test_secret_key_changes_with_the_secret():
    assert visitor_key("2024-05-17", "10.0.0.1", "a") != visitor_key("2024-05-17", "10.0.0.1", "b")


def test_hashing_failure_falls_back_to_raw_address():
    # A lone surrogate cannot be encoded as UTF-8
    address = "bad\ud800addr"
    assert visitor_key("2024-05-17", address, "pepper") == address
