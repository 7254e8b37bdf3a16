"""Tests for day bucket encoding and decoding."""
import json
import zlib

from pageviews.domain.analytics.models import Action
from pageviews.domain.analytics.visitor import visitor_key
from pageviews.infra.persistence.codec import decode_bucket, encode_bucket
from pageviews.shared import metrics


def test_roundtrip_empty_bucket():
    assert decode_bucket(encode_bucket({})) == {}


def test_roundtrip_visitors_with_zero_one_and_many_actions():
    bucket = {
        "10.0.0.1": [],
        "10.0.0.2": [Action("/blog/post", "a=1")],
        "10.0.0.3": [Action("/", ""), Action("/a", "x=1&y=2"), Action("/a", "x=1&y=2")],
    }
    assert decode_bucket(encode_bucket(bucket)) == bucket


def test_roundtrip_preserves_hashed_keys():
    key = visitor_key("2024-05-17", "10.0.0.1", "pepper")
    bucket = {key: [Action("/p", "")]}
    decoded = decode_bucket(encode_bucket(bucket))
    assert list(decoded) == [key]
    assert len(key) == 32


def test_encoded_payload_is_zlib_json_with_page_and_query_fields():
    raw = encode_bucket({"1.2.3.4": [Action("/x", "q=1")]})
    payload = json.loads(zlib.decompress(raw))
    assert payload == {"1.2.3.4": [{"Page": "/x", "Query": "q=1"}]}


def test_decode_missing_input_is_empty():
    assert decode_bucket(None) == {}


def test_decode_garbage_is_empty_and_counted():
    assert decode_bucket(b"definitely not zlib") == {}
    assert metrics.snapshot()["decode_failed"] == 1


def test_decode_non_json_payload_is_empty():
    assert decode_bucket(zlib.compress(b"{not json")) == {}


def test_decode_non_object_payload_is_empty():
    assert decode_bucket(zlib.compress(b"[1, 2, 3]")) == {}


def test_decode_malformed_actions_is_empty():
    assert decode_bucket(zlib.compress(b'{"a": ["oops"]}')) == {}


def test_decode_accepts_null_action_list():
    assert decode_bucket(zlib.compress(b'{"a": null}')) == {"a": []}
