"""
HMAC-SHA256 signing compatible with the Imbo server.

Two outputs are produced from the user's private key:

* access tokens, proving a read URL was generated by a key holder, and
* request signatures, authorizing a single write request at a given time.

Both are pure functions of their input strings.
"""

import datetime
import hashlib
import hmac
from typing import Optional, Union

from .constants import TIMESTAMP_FORMAT
from .exceptions import InvalidArgumentError

Timestamp = Union[datetime.datetime, int, float, str]


def sha256_sign(private_key: str, data: str) -> str:
    """
    Generate a hex-encoded HMAC-SHA256 of data.

    Args:
        private_key: HMAC key
        data: Data to sign

    Returns:
        Hex-encoded HMAC signature
    """
    mac = hmac.new(
        private_key.encode('utf-8'),
        data.encode('utf-8'),
        hashlib.sha256
    )
    return mac.hexdigest()


def generate_access_token(url: str, private_key: str) -> str:
    """
    Generate the access token for a read URL.

    The url must be the complete URL, query string included, in its
    unencoded form and without any access token.
    """
    return sha256_sign(private_key, url)


def format_timestamp(when: Optional[Timestamp] = None) -> str:
    """
    Format a point in time the way the server expects request timestamps.

    Args:
        when: A datetime (naive values are taken as UTC), epoch milliseconds,
            an already formatted string, or None for the current time

    Returns:
        Timestamp formatted as YYYY-MM-DDTHH:MM:SSZ in UTC
    """
    if when is None:
        when = datetime.datetime.now(datetime.timezone.utc)
    elif isinstance(when, str):
        return when
    elif isinstance(when, (int, float)) and not isinstance(when, bool):
        when = datetime.datetime.fromtimestamp(when / 1000, datetime.timezone.utc)
    elif isinstance(when, datetime.datetime):
        if when.tzinfo is None:
            when = when.replace(tzinfo=datetime.timezone.utc)
        when = when.astimezone(datetime.timezone.utc)
    else:
        raise InvalidArgumentError(f"Unsupported timestamp type: {type(when).__name__}")

    return when.strftime(TIMESTAMP_FORMAT)


def generate_signature(method: str, url: str, public_key: str,
                       timestamp: str, private_key: str) -> str:
    """
    Generate the signature for a write request.

    Format: HMAC-SHA256(method + "|" + url + "|" + public_key + "|" + timestamp)

    Args:
        method: HTTP method
        url: URL or path of the resource, as it will be requested
        public_key: Public key of the signer
        timestamp: Formatted request timestamp
        private_key: Private key of the signer

    Returns:
        Hex-encoded signature
    """
    data = '|'.join([method.upper(), url, public_key, timestamp])
    return sha256_sign(private_key, data)
