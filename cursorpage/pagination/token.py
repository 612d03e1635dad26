"""
Opaque token codec.

Wire format: compact JSON -> brotli -> URL-safe base64 (padding stripped).
Changing any of the three steps breaks every token already handed out.
"""

import base64
import binascii
import json
from typing import Any

import brotli

from cursorpage.exceptions import MalformedTokenError


class OpaqueToken:
    """
    Reversible, URL-safe encoding of small JSON-compatible payloads.

    Example:
        >>> token = OpaqueToken.create({"offset": 20})
        >>> OpaqueToken.parse(token)
        {'offset': 20}
    """

    @staticmethod
    def create(unencoded: Any) -> str:
        serialized = json.dumps(unencoded, separators=(",", ":"), default=str)
        compressed = brotli.compress(serialized.encode())
        return base64.urlsafe_b64encode(compressed).decode().rstrip("=")

    @staticmethod
    def parse(encoded: str | None) -> Any:
        """
        Decode a token produced by ``create``.

        Raises:
            MalformedTokenError: If the token is missing or any decoding stage
                fails; ``stage`` names the failing step.
        """
        if encoded is None:
            raise MalformedTokenError("token is missing", stage="missing")

        try:
            padded = encoded + "=" * (-len(encoded) % 4)
            decoded = base64.b64decode(padded, altchars=b"-_", validate=True)
        except (binascii.Error, ValueError) as ex:
            raise MalformedTokenError(
                f"invalid token encoding: {ex}", stage="encoding"
            ) from ex

        try:
            decompressed = brotli.decompress(decoded)
        except brotli.error as ex:
            raise MalformedTokenError(
                f"invalid token compression: {ex}", stage="compression"
            ) from ex

        try:
            return json.loads(decompressed.decode())
        except (UnicodeDecodeError, json.JSONDecodeError) as ex:
            raise MalformedTokenError(
                f"invalid token structure: {ex}", stage="structure"
            ) from ex
