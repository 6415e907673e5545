"""
URL objects for resources on an Imbo server.

ImboUrl builds a resource URL and appends the access token proving it was
generated by the holder of the private key. ImageUrl adds the fluent image
transformation methods; every call appends one transformation and returns
the same URL so calls can be chained::

    url = ImageUrl("http://imbo", "pub", "priv", image_identifier)
    url.flip_vertically().max_size(123, 456).border('#bf1942').png()
    str(url)

The private key is only used to compute the token and never appears in the
generated URL.
"""

import re
from typing import List, Optional, Tuple, Union
from urllib.parse import quote, unquote, unquote_plus, urlsplit

from . import transformations
from .constants import (
    PARAM_ACCESS_TOKEN,
    PARAM_PUBLIC_KEY,
    PARAM_TRANSFORMATIONS,
    URL_COMPONENT_SAFE
)
from .exceptions import InvalidArgumentError, InvalidConfigurationError
from .signing import generate_access_token

_IMAGE_PATH_RE = re.compile(
    r'^(?P<prefix>.*?)/users/(?P<user>[^/]+)/images/(?P<identifier>[^/.]+)'
    r'(?:\.(?P<extension>[^/.]+))?$'
)


def encode_component(value: str) -> str:
    """Percent-encode value like JavaScript's encodeURIComponent."""
    return quote(value, safe=URL_COMPONENT_SAFE)


def _require_string(value, field: str):
    if not isinstance(value, str) or not value:
        raise InvalidConfigurationError(f"{field} must be a non-empty string")


def _join_query(url: str, query: str) -> str:
    if not query:
        return url
    return f"{url}{'&' if '?' in url else '?'}{query}"


class ImboUrl:
    """
    Signed URL for a resource on an Imbo server.

    The query string is assembled as the passthrough query string first,
    followed by any parameters added by subclasses, then the public key (when
    the user differs from the public key) and finally the access token.
    """

    def __init__(self, base_url: str, public_key: str, private_key: str,
                 path: str = '', user: Optional[str] = None,
                 query_string: Optional[str] = None):
        """
        Initialize URL.

        Args:
            base_url: Scheme and host of the server, optionally with a path prefix
            public_key: Public key acting on the resource
            private_key: Private key used to compute the access token
            path: Resource path relative to base_url
            user: User owning the resource (defaults to public_key)
            query_string: Query parameters passed through unmodified

        Raises:
            InvalidConfigurationError: If a required field is missing or malformed
        """
        _require_string(base_url, 'base_url')
        _require_string(public_key, 'public_key')
        _require_string(private_key, 'private_key')
        if user is not None:
            _require_string(user, 'user')
        if query_string is not None and not isinstance(query_string, str):
            raise InvalidConfigurationError("query_string must be a string")

        self.base_url = base_url.rstrip('/')
        self.public_key = public_key
        self.private_key = private_key
        self.user = user if user is not None else public_key
        self.path = '/' + path.lstrip('/') if path else ''
        self.query_string = (query_string or '').lstrip('?')

    def get_path(self) -> str:
        return self.path

    def _query_params(self) -> List[Tuple[str, str]]:
        """Parameters appended after the passthrough query string."""
        return []

    def get_query_string(self, encode: bool = False) -> str:
        """
        Build the query string without public key and access token.

        Args:
            encode: Percent-encode the keys and values of generated parameters

        Returns:
            Query string, empty if there are no parameters
        """
        parts = [self.query_string] if self.query_string else []
        for key, value in self._query_params():
            if encode:
                key, value = encode_component(key), encode_component(value)
            parts.append(f"{key}={value}")
        return '&'.join(parts)

    def get_resource_url(self, encode: bool = False) -> str:
        """Full URL without public key and access token."""
        return _join_query(self.base_url + self.get_path(), self.get_query_string(encode))

    def _get_public_url(self, encode: bool) -> str:
        url = self.get_resource_url(encode)
        if self.user != self.public_key:
            public_key = encode_component(self.public_key) if encode else self.public_key
            url = _join_query(url, f"{PARAM_PUBLIC_KEY}={public_key}")
        return url

    def get_access_token(self) -> str:
        """Access token for the URL, computed over its unencoded form."""
        return generate_access_token(self._get_public_url(encode=False), self.private_key)

    def get_url(self) -> str:
        """Encoded URL including the trailing access token."""
        return _join_query(
            self._get_public_url(encode=True),
            f"{PARAM_ACCESS_TOKEN}={self.get_access_token()}"
        )

    def __str__(self) -> str:
        return self.get_url()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.get_resource_url()}>"


class ImageUrl(ImboUrl):
    """URL for an image, with chainable image transformations."""

    def __init__(self, base_url: str, public_key: str, private_key: str,
                 image_identifier: str, user: Optional[str] = None,
                 query_string: Optional[str] = None):
        _require_string(image_identifier, 'image_identifier')
        super().__init__(base_url, public_key, private_key, user=user,
                         query_string=query_string)
        self.image_identifier = image_identifier
        self.extension = None
        self._transformations = []

    @classmethod
    def parse(cls, url: str, private_key: str,
              public_key: Optional[str] = None) -> 'ImageUrl':
        """
        Create an ImageUrl from an existing image URL.

        Transformations are kept as raw transformations, in order. The access
        token is dropped and any other parameter is passed through. The public
        key is read from the URL, falling back to public_key and then to the
        user in the path.

        Raises:
            InvalidArgumentError: If url is not an image URL
        """
        parts = urlsplit(url)
        match = _IMAGE_PATH_RE.match(parts.path)
        if not parts.scheme or not parts.netloc or not match:
            raise InvalidArgumentError(f"Not an image URL: {url!r}")

        raw_transformations, passthrough = [], []
        for segment in filter(None, parts.query.split('&')):
            key, _, value = segment.partition('=')
            key = unquote_plus(key)
            if key == PARAM_TRANSFORMATIONS:
                raw_transformations.append(unquote(value))
            elif key == PARAM_PUBLIC_KEY:
                public_key = unquote(value)
            elif key != PARAM_ACCESS_TOKEN:
                passthrough.append(segment)

        user = unquote(match.group('user'))
        image_url = cls(
            f"{parts.scheme}://{parts.netloc}{match.group('prefix')}",
            public_key or user,
            private_key,
            match.group('identifier'),
            user=user,
            query_string='&'.join(passthrough)
        )
        if match.group('extension'):
            image_url.convert(match.group('extension'))
        for value in raw_transformations:
            image_url.append(value)
        return image_url

    def get_path(self) -> str:
        path = f"/users/{self.user}/images/{self.image_identifier}"
        if self.extension:
            path += '.' + self.extension
        return path

    def _query_params(self) -> List[Tuple[str, str]]:
        return [(PARAM_TRANSFORMATIONS, t.canonical) for t in self._transformations]

    def _add(self, transformation) -> 'ImageUrl':
        self._transformations.append(transformation)
        return self

    def get_transformations(self) -> List[str]:
        """Unencoded transformations in the order they were applied."""
        return [t.canonical for t in self._transformations]

    def reset(self) -> 'ImageUrl':
        """Remove all transformations and the output format."""
        self._transformations = []
        self.extension = None
        return self

    def append(self, transformation: str) -> 'ImageUrl':
        """Append a pre-formatted transformation, e.g. 'custom:foo=bar'."""
        return self._add(transformations.raw(transformation))

    def convert(self, extension: str) -> 'ImageUrl':
        """Set the output format. Calling it again replaces the format."""
        if not isinstance(extension, str) or not extension.strip('.'):
            raise InvalidArgumentError(f"Invalid image type: {extension!r}")
        self.extension = extension.strip('.')
        return self

    def gif(self) -> 'ImageUrl':
        return self.convert('gif')

    def jpg(self) -> 'ImageUrl':
        return self.convert('jpg')

    def png(self) -> 'ImageUrl':
        return self.convert('png')

    def auto_rotate(self) -> 'ImageUrl':
        return self._add(transformations.auto_rotate())

    def border(self, color=None, width=None, height=None) -> 'ImageUrl':
        return self._add(transformations.border(color, width, height))

    def canvas(self, width, height, mode=None, x=None, y=None, bg=None) -> 'ImageUrl':
        return self._add(transformations.canvas(width, height, mode, x, y, bg))

    def compress(self, level=None) -> 'ImageUrl':
        return self._add(transformations.compress(level))

    def crop(self, x, y, width, height, mode=None) -> 'ImageUrl':
        return self._add(transformations.crop(x, y, width, height, mode))

    def desaturate(self) -> 'ImageUrl':
        return self._add(transformations.desaturate())

    def flip_horizontally(self) -> 'ImageUrl':
        return self._add(transformations.flip_horizontally())

    def flip_vertically(self) -> 'ImageUrl':
        return self._add(transformations.flip_vertically())

    def max_size(self, width=None, height=None) -> 'ImageUrl':
        return self._add(transformations.max_size(width, height))

    def modulate(self, brightness=None, saturation=None, hue=None) -> 'ImageUrl':
        return self._add(transformations.modulate(brightness, saturation, hue))

    def progressive(self) -> 'ImageUrl':
        return self._add(transformations.progressive())

    def resize(self, width=None, height=None) -> 'ImageUrl':
        return self._add(transformations.resize(width, height))

    def rotate(self, angle, bg=None) -> 'ImageUrl':
        return self._add(transformations.rotate(angle, bg))

    def sepia(self, threshold=None) -> 'ImageUrl':
        return self._add(transformations.sepia(threshold))

    def strip(self) -> 'ImageUrl':
        return self._add(transformations.strip())

    def thumbnail(self, width=None, height=None, fit=None) -> 'ImageUrl':
        return self._add(transformations.thumbnail(width, height, fit))

    def transpose(self) -> 'ImageUrl':
        return self._add(transformations.transpose())

    def transverse(self) -> 'ImageUrl':
        return self._add(transformations.transverse())

    def watermark(self, img=None, width=None, height=None, position=None,
                  x=None, y=None) -> 'ImageUrl':
        return self._add(transformations.watermark(img, width, height, position, x, y))


class ShortUrl:
    """Short URL for an image, as returned by the server."""

    def __init__(self, id: str, host: str = ''):
        self.id = id
        self.host = host.rstrip('/')

    def get_id(self) -> str:
        return self.id

    def get_url(self) -> str:
        return f"{self.host}/s/{self.id}"

    def __str__(self) -> str:
        return self.get_url()


ShortUrlLike = Union[ShortUrl, str]
