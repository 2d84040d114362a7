"""Oway API environment URLs."""

from enum import StrEnum


class OwayEnvironment(StrEnum):
    """Base URLs of the Oway REST API."""

    # No real shipments are created in sandbox.
    SANDBOX = "https://rest-api.sandbox.oway.io"
    # Live traffic, shipments are billed.
    PRODUCTION = "https://rest-api.oway.io"


TOKEN_PATH = "/v1/auth/token"
