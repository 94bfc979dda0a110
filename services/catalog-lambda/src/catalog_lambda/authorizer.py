"""
HTTP Basic authorization for API Gateway token authorizers.

A well-formed token always yields a policy: Allow for a known user with the
right secret, Deny otherwise. A missing or malformed token raises
AuthenticationError, which API Gateway reports as 401.
"""

import base64
import binascii
import hmac
import re
from typing import Mapping, Optional

from .exceptions import AuthenticationError
from .logging_config import get_logger

logger = get_logger(__name__)

_BASIC_TOKEN_RE = re.compile(r"^Basic (.+)$")

ALLOW = "Allow"
DENY = "Deny"


def decode_basic_token(token: Optional[str]) -> tuple[str, str]:
    """
    Extract ``(username, secret)`` from a ``Basic <base64>`` token.

    Raises:
        AuthenticationError: If the token is missing, uses another scheme, or
            does not decode to a non-empty ``username:secret`` pair
    """
    if not token:
        raise AuthenticationError("No authorization token provided")

    match = _BASIC_TOKEN_RE.match(token)
    if not match:
        raise AuthenticationError("Invalid authorization token format")

    try:
        decoded = base64.b64decode(match.group(1), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise AuthenticationError("Authorization token is not valid base64")

    username, _, secret = decoded.partition(":")
    if not username or not secret:
        raise AuthenticationError("Invalid credentials format")
    return username, secret


def generate_policy(principal_id: str, effect: str, resource: str) -> dict:
    """Build the IAM policy document API Gateway expects from an authorizer."""
    return {
        "principalId": principal_id,
        "policyDocument": {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Action": "execute-api:Invoke",
                    "Effect": effect,
                    "Resource": resource,
                }
            ],
        },
    }


class BasicAuthorizer:
    """Checks Basic credentials against a static username -> secret map."""

    def __init__(self, credentials: Mapping[str, str]):
        self.credentials = credentials

    def authorize(self, token: Optional[str], method_arn: str) -> dict:
        username, secret = decode_basic_token(token)
        logger.info(f"Attempting to authorize user: {username}")

        expected = self.credentials.get(username)
        if expected is None:
            logger.warning(f"User {username} not found")
            return generate_policy(username, DENY, method_arn)

        if not hmac.compare_digest(expected.encode("utf-8"), secret.encode("utf-8")):
            logger.warning(f"Invalid password for user {username}")
            return generate_policy(username, DENY, method_arn)

        logger.info(f"User {username} authorized successfully")
        return generate_policy(username, ALLOW, method_arn)
