#!/usr/bin/env python3
"""
Content fingerprinting for change detection and loop prevention.

The fingerprint is an MD5 hex digest over the canonical string form of the
content: the raw text for text, the key-ordered JSON form for structured
content such as a ContentRef. It is a change detector, not a security hash.
Two contents that serialize identically are indistinguishable.

This module provides:
- canonical_form(): the string the fingerprint is computed over
- compute_fingerprint(): MD5 hex digest of canonical_form()
- content_size(): UTF-8 byte length of canonical_form()
- hash_string(): MD5 hex digest of an arbitrary string
"""
from __future__ import annotations

import hashlib
import json
from typing import Any

__all__ = ["canonical_form", "compute_fingerprint", "content_size", "hash_string"]


def hash_string(value: str) -> str:
    """
    Compute the MD5 hex digest of a string.

    Args:
        value: String to hash, encoded as UTF-8.

    Returns:
        Hexadecimal string representation of the digest.
    """
    return hashlib.md5(value.encode("utf-8")).hexdigest()


def canonical_form(content: Any) -> str:
    """
    Return the canonical string form of clipboard content.

    Args:
        content: A str, an object with to_dict(), a mapping, or anything else.

    Returns:
        Raw text for strings, sorted-key JSON for structured content,
        str() for everything else.
    """
    if isinstance(content, str):
        return content
    if hasattr(content, "to_dict"):
        content = content.to_dict()
    if isinstance(content, dict):
        return json.dumps(content, sort_keys=True, separators=(",", ":"), default=str)
    return str(content)


def compute_fingerprint(content: Any) -> str:
    """
    Compute the fingerprint of clipboard content.

    Args:
        content: Clipboard content (see canonical_form()).

    Returns:
        MD5 hex digest of the canonical form.
    """
    return hash_string(canonical_form(content))


def content_size(content: Any) -> int:
    """
    Compute the serialized byte length of clipboard content.

    Args:
        content: Clipboard content (see canonical_form()).

    Returns:
        Number of bytes in the UTF-8 encoded canonical form.
    """
    return len(canonical_form(content).encode("utf-8"))
