"""Tests for status classification."""

import pytest

from snapie.models.video import CollectionKind, StatusCategory
from snapie.services.resolver.status_classifier import classify


@pytest.mark.parametrize("status,expected", [
    ("published", StatusCategory.READY),
    ("PUBLISHED", StatusCategory.READY),
    (" scheduled ", StatusCategory.READY),
    ("publish_manual", StatusCategory.READY),
    ("publish_later", StatusCategory.READY),
    ("encoding_ipfs", StatusCategory.PROCESSING),
    ("uploading", StatusCategory.PROCESSING),
    ("processing", StatusCategory.PROCESSING),
    ("finalizing", StatusCategory.PROCESSING),
    ("ipfs_pinning", StatusCategory.PROCESSING),
    ("failed", StatusCategory.FAILED),
    ("encoding_failed", StatusCategory.FAILED),
    ("deleted", StatusCategory.DELETED),
    ("self_deleted", StatusCategory.DELETED),
    ("Deleted", StatusCategory.DELETED),
])
def test_known_statuses(status, expected):
    assert classify(status) == expected


@pytest.mark.parametrize("status", [None, "", "   ", "garbage", "publishedd", "null", 42, ["published"]])
def test_anything_else_is_unknown(status):
    assert classify(status) == StatusCategory.UNKNOWN


def test_embed_ready_without_manifest_is_demoted():
    assert classify("published", CollectionKind.EMBED, has_manifest=False) == StatusCategory.UNKNOWN
    assert classify("published", CollectionKind.EMBED, has_manifest=True) == StatusCategory.READY


def test_manifest_flag_only_matters_for_embed_ready():
    assert classify("published", CollectionKind.LEGACY, has_manifest=False) == StatusCategory.READY
    assert classify("deleted", CollectionKind.EMBED, has_manifest=False) == StatusCategory.DELETED
