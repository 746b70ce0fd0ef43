"""Unit tests for S3 URI parsing."""

from __future__ import annotations

import pytest

from core.errors import AtlasIngestError
from core.s3_uri import is_s3_uri, parse_s3_uri


def test_parse_s3_uri_splits_bucket_and_key() -> None:
    """Parser should split the bucket from a nested object key."""
    location = parse_s3_uri("s3://open-data/nyc/collisions.csv")

    assert (location.bucket, location.key) == ("open-data", "nyc/collisions.csv")


@pytest.mark.parametrize("uri", ["s3://", "s3://bucket", "s3://bucket/"])
def test_parse_s3_uri_requires_bucket_and_key(uri: str) -> None:
    """URIs without both parts should be rejected."""
    with pytest.raises(AtlasIngestError):
        parse_s3_uri(uri)


def test_is_s3_uri_checks_scheme() -> None:
    """Only s3:// URIs should route to the S3 reader."""
    assert is_s3_uri("s3://bucket/key.csv")
    assert not is_s3_uri("data/collisions.csv")
