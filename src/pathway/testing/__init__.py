"""Test utilities for pathway applications.

Provides an ASGI test client and response assertions::

    from pathway.testing import TestClient, assert_text
"""

from pathway.testing.assertions import (
    assert_contains,
    assert_header,
    assert_status,
    assert_text,
)
from pathway.testing.client import ClientResponse, TestClient

__all__ = [
    "ClientResponse",
    "TestClient",
    "assert_contains",
    "assert_header",
    "assert_status",
    "assert_text",
]
