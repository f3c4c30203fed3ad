"""Assertion helpers for pathway tests.

Each assertion produces a clear error message on failure.
"""

from pathway.testing.client import ClientResponse


def assert_status(response: ClientResponse, status: int) -> None:
    """Assert the response has the expected status code."""
    assert response.status == status, (
        f"Expected status {status}, got {response.status}.\n"
        f"Response body: {response.text[:500]}"
    )


def assert_text(response: ClientResponse, text: str, *, status: int = 200) -> None:
    """Assert the response has *status* and exactly *text* as its body."""
    assert_status(response, status)
    assert response.text == text, (
        f"Expected body {text!r}, got {response.text[:500]!r}"
    )


def assert_contains(response: ClientResponse, text: str) -> None:
    """Assert the response body contains the given text."""
    assert text in response.text, (
        f"Response does not contain {text!r}.\n"
        f"Response body: {response.text[:500]}"
    )


def assert_header(response: ClientResponse, name: str, value: str) -> None:
    """Assert response header *name* (case-insensitive) equals *value*."""
    actual = response.header(name)
    assert actual == value, (
        f"Expected header {name!r} to be {value!r}, got {actual!r}"
    )
