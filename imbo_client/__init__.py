"""
Imbo Client Library

A Python client library that builds image transformation URLs with access
tokens and signs write requests for the Imbo image server.

Example usage:
    from imbo_client import ImboClient

    client = ImboClient("http://imbo.example.com", "public-key", "private-key")
    url = client.get_image_url(image_identifier).thumbnail(200, 200).png()
    print(url)
"""

from .client import ImboClient
from .exceptions import (
    ImboClientError,
    InvalidArgumentError,
    InvalidConfigurationError,
    ResourceExistsError,
    HTTPError
)
from .query import Query
from .signing import (
    generate_access_token,
    generate_signature,
    format_timestamp
)
from .transformations import Transformation, RawTransformation
from .url import ImboUrl, ImageUrl, ShortUrl

__version__ = "1.0.0"
__all__ = [
    "ImboClient",
    "ImboUrl",
    "ImageUrl",
    "ShortUrl",
    "Query",
    "Transformation",
    "RawTransformation",
    "generate_access_token",
    "generate_signature",
    "format_timestamp",
    "ImboClientError",
    "InvalidArgumentError",
    "InvalidConfigurationError",
    "ResourceExistsError",
    "HTTPError"
]
