"""
Imbo client.

Holds the server configuration, creates URL objects for the server's
resources and issues requests against them. Read requests (GET/HEAD) use
URLs carrying an access token, write requests use URLs signed with the
request method and a timestamp.
"""

import json
import logging
from email.utils import parsedate_to_datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
from urllib.parse import urlsplit

import requests

from . import signing
from .constants import (
    DEFAULT_CONFIG,
    IMAGE_PROPERTY_HEADERS,
    PARAM_PUBLIC_KEY,
    PARAM_SIGNATURE,
    PARAM_TIMESTAMP
)
from .exceptions import (
    ImboClientError,
    InvalidArgumentError,
    InvalidConfigurationError,
    ResourceExistsError,
    HTTPError
)
from .query import Query
from .url import ImageUrl, ImboUrl, ShortUrl, ShortUrlLike, encode_component

logger = logging.getLogger(__name__)

READ_METHODS = ('GET', 'HEAD')


class ImboClient:
    """
    Client for an Imbo server.

    Image URLs are spread over the configured hosts based on the image
    identifier; every other resource lives on the first host.
    """

    def __init__(self, hosts: Union[str, Sequence[str]], public_key: str,
                 private_key: str, user: Optional[str] = None, **config):
        """
        Initialize Imbo client.

        Args:
            hosts: Server URL, or list of URLs serving the same installation
            public_key: Public key of the client
            private_key: Private key matching public_key
            user: User to act on behalf of (defaults to public_key)
            **config: Configuration options (timeout)

        Raises:
            InvalidConfigurationError: If any of the arguments is invalid
        """
        self.hosts = self._parse_hosts(hosts)
        self.public_key = public_key
        self.private_key = private_key
        self._user = public_key if user is None else user

        # Merge default config with user overrides
        self.config = {**DEFAULT_CONFIG, **config}

        self._validate_config()

        self.session = requests.Session()

    @staticmethod
    def _parse_hosts(hosts) -> List[str]:
        if isinstance(hosts, str):
            hosts = [hosts]
        if not isinstance(hosts, (list, tuple)) or not hosts:
            raise InvalidConfigurationError("hosts must be a URL or a non-empty list of URLs")

        parsed = []
        for host in hosts:
            if not isinstance(host, str):
                raise InvalidConfigurationError(f"hosts contains an invalid URL: {host!r}")
            url = host if '://' in host else 'http://' + host
            if not urlsplit(url).netloc:
                raise InvalidConfigurationError(f"hosts contains an invalid URL: {host!r}")
            parsed.append(url.rstrip('/'))
        return parsed

    def _validate_config(self):
        """Validate client configuration."""
        for field in ('public_key', 'private_key'):
            value = getattr(self, field)
            if not isinstance(value, str) or not value:
                raise InvalidConfigurationError(f"{field} must be a non-empty string")

        if not isinstance(self._user, str) or not self._user:
            raise InvalidConfigurationError("user must be a non-empty string")

        timeout = self.config['timeout']
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            raise InvalidConfigurationError(f"timeout must be a positive number, got {timeout!r}")

    def user(self, user: Optional[str]) -> 'ImboClient':
        """Act on behalf of another user. None switches back to the public key."""
        if user is None:
            user = self.public_key
        if not isinstance(user, str) or not user:
            raise InvalidArgumentError("user must be a non-empty string")
        self._user = user
        return self

    def get_user(self) -> str:
        return self._user

    def get_host_for_image_identifier(self, image_identifier: str) -> str:
        """
        Pick the host serving an image.

        The first two characters of the identifier, read as a hexadecimal
        number, select the host, so an image always maps to the same host.
        """
        self._check_image_identifier(image_identifier)
        try:
            value = int(image_identifier[:2], 16)
        except ValueError:
            value = sum(map(ord, image_identifier[:2]))
        return self.hosts[value % len(self.hosts)]

    @staticmethod
    def _check_image_identifier(image_identifier):
        if not isinstance(image_identifier, str) or not image_identifier:
            raise InvalidArgumentError("imageIdentifier must be a non-empty string")

    def _url(self, path: str, query_string: Optional[str] = None,
             host: Optional[str] = None) -> ImboUrl:
        return ImboUrl(
            host or self.hosts[0],
            self.public_key,
            self.private_key,
            path=path,
            user=self._user,
            query_string=query_string
        )

    def get_image_url(self, image_identifier: str) -> ImageUrl:
        """URL for an image, on the host serving it."""
        self._check_image_identifier(image_identifier)
        return ImageUrl(
            self.get_host_for_image_identifier(image_identifier),
            self.public_key,
            self.private_key,
            image_identifier,
            user=self._user
        )

    def parse_image_url(self, url: str, private_key: Optional[str] = None) -> ImageUrl:
        """Create an ImageUrl from a URL string, signing with private_key if given."""
        return ImageUrl.parse(url, private_key or self.private_key, self.public_key)

    def get_images_url(self, query: Optional[Query] = None) -> ImboUrl:
        """
        URL for the images of the current user.

        A query filtering on users targets the global images resource instead.
        """
        if query is not None and query.has_users():
            path = '/images'
        else:
            path = f'/users/{self._user}/images'
        return self._url(path, str(query) if query is not None else None)

    def get_user_url(self) -> ImboUrl:
        return self._url(f'/users/{self._user}')

    def get_status_url(self) -> ImboUrl:
        return self._url('/status')

    def get_stats_url(self) -> ImboUrl:
        return self._url('/stats')

    def get_metadata_url(self, image_identifier: str) -> ImboUrl:
        self._check_image_identifier(image_identifier)
        return self._url(f'/users/{self._user}/images/{image_identifier}/meta')

    def get_short_urls_url(self, image_identifier: str) -> ImboUrl:
        return self._url(
            f'/users/{self._user}/images/{image_identifier}/shorturls',
            host=self.get_host_for_image_identifier(image_identifier)
        )

    def get_short_url_url(self, image_identifier: str, short_id: ShortUrlLike) -> ImboUrl:
        if isinstance(short_id, ShortUrl):
            short_id = short_id.get_id()
        return self._url(
            f'/users/{self._user}/images/{image_identifier}/shorturls/{short_id}',
            host=self.get_host_for_image_identifier(image_identifier)
        )

    def get_resource_groups_url(self) -> ImboUrl:
        return self._url('/groups')

    def get_resource_group_url(self, name: str) -> ImboUrl:
        if not isinstance(name, str) or not name:
            raise InvalidArgumentError("Resource group name must be a non-empty string")
        return self._url(f'/groups/{name}')

    @staticmethod
    def _check_public_key(public_key):
        if not isinstance(public_key, str) or not public_key:
            raise InvalidArgumentError("public key must be a non-empty string")

    def get_public_key_url(self, public_key: str) -> ImboUrl:
        self._check_public_key(public_key)
        return self._url(f'/keys/{public_key}')

    def get_access_control_rules_url(self, public_key: str) -> ImboUrl:
        self._check_public_key(public_key)
        return self._url(f'/keys/{public_key}/access')

    def get_access_control_rule_url(self, public_key: str, rule_id: Union[int, str]) -> ImboUrl:
        self._check_public_key(public_key)
        if isinstance(rule_id, bool) or not isinstance(rule_id, (int, str)) or rule_id == '':
            raise InvalidArgumentError(f"Invalid access control rule id: {rule_id!r}")
        return self._url(f'/keys/{public_key}/access/{rule_id}')

    def get_resource_url(self, path: str, query: Union[Query, str, None] = None) -> ImboUrl:
        """URL for an arbitrary resource path, with an optional query."""
        return self._url(path, str(query) if query is not None else None)

    def generate_signature(self, method: str, url: str,
                           timestamp: signing.Timestamp) -> str:
        """
        Generate the signature of a write request.

        Args:
            method: HTTP method
            url: URL or path, as it will be requested
            timestamp: Request time (datetime, epoch milliseconds or formatted string)

        Returns:
            Hex-encoded HMAC-SHA256 signature
        """
        return signing.generate_signature(
            method,
            url,
            self.public_key,
            signing.format_timestamp(timestamp),
            self.private_key
        )

    def get_signed_resource_url(self, method: str, url: Union[ImboUrl, str],
                                timestamp: Optional[signing.Timestamp] = None) -> str:
        """
        Sign a URL for a write request.

        The public key is added to the URL when acting on behalf of another
        user and is covered by the signature. Signature and timestamp are
        appended last.

        Args:
            method: HTTP method
            url: URL object or URL/path string
            timestamp: Request time, defaults to now

        Returns:
            Signed URL
        """
        if isinstance(url, ImboUrl):
            url = url.get_resource_url(encode=True)

        timestamp = signing.format_timestamp(timestamp)
        if self._user != self.public_key:
            url += f"{'&' if '?' in url else '?'}{PARAM_PUBLIC_KEY}={encode_component(self.public_key)}"

        signature = self.generate_signature(method, url, timestamp)
        logger.debug("Signed %s request for %s", method, urlsplit(url).path)

        return (
            f"{url}{'&' if '?' in url else '?'}"
            f"{PARAM_SIGNATURE}={signature}&{PARAM_TIMESTAMP}={encode_component(timestamp)}"
        )

    def _prepare_request_body(self, json_data=None) -> bytes:
        """Prepare request body."""
        if json_data is None:
            return b''
        return json.dumps(json_data, separators=(',', ':')).encode('utf-8')

    def _make_request(self, method: str, url: ImboUrl, json_data=None,
                      **kwargs) -> requests.Response:
        """
        Make authenticated HTTP request.

        Args:
            method: HTTP method
            url: URL object for the resource
            json_data: JSON data to send
            **kwargs: Additional requests arguments

        Returns:
            requests.Response object

        Raises:
            HTTPError: If the request fails or the server responds with an error
        """
        if method in READ_METHODS:
            target = url.get_url()
        else:
            target = self.get_signed_resource_url(method, url)

        body = self._prepare_request_body(json_data)
        headers = kwargs.get('headers', {})
        headers.setdefault('Accept', 'application/json')
        if json_data is not None:
            headers['Content-Type'] = 'application/json'
        kwargs['headers'] = headers

        if body:
            kwargs['data'] = body
        kwargs.setdefault('timeout', self.config['timeout'])

        logger.debug("%s %s", method, url.get_path())
        try:
            response = self.session.request(method, target, **kwargs)
        except requests.RequestException as e:
            raise HTTPError(f"HTTP request failed: {e}")

        if not response.ok:
            raise HTTPError(
                f"{method} {url.get_path()} failed with status {response.status_code}",
                status_code=response.status_code,
                body=response.text
            )
        return response

    def _exists(self, url: ImboUrl) -> bool:
        try:
            self._make_request('HEAD', url)
        except HTTPError as e:
            if e.status_code == 404:
                return False
            raise
        return True

    def get_server_status(self) -> Dict[str, Any]:
        """Server status, with 'date' parsed into a datetime and the HTTP status added."""
        response = self._make_request('GET', self.get_status_url())
        info = response.json()
        if 'date' in info:
            info['date'] = parsedate_to_datetime(info['date'])
        info['status'] = response.status_code
        return info

    def get_server_stats(self) -> Dict[str, Any]:
        return self._make_request('GET', self.get_stats_url()).json()

    def get_user_info(self) -> Dict[str, Any]:
        """User information, with 'lastModified' parsed into a datetime."""
        info = self._make_request('GET', self.get_user_url()).json()
        if 'lastModified' in info:
            info['lastModified'] = parsedate_to_datetime(info['lastModified'])
        return info

    def get_images(self, query: Optional[Query] = None) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """
        List images.

        Returns:
            Tuple of (images, search) where search holds the paging information
        """
        body = self._make_request('GET', self.get_images_url(query)).json()
        return body.get('images', []), body.get('search', {})

    def head_image(self, image_identifier: str) -> requests.Response:
        return self._make_request('HEAD', self.get_image_url(image_identifier))

    def image_identifier_exists(self, image_identifier: str) -> bool:
        return self._exists(self.get_image_url(image_identifier))

    def delete_image(self, image_identifier: str) -> requests.Response:
        return self._make_request('DELETE', self.get_image_url(image_identifier))

    def get_image_properties(self, image_identifier: str) -> Dict[str, Any]:
        """
        Properties of the original image, read from the headers of a HEAD request.

        Returns:
            Dict with width, height, filesize, extension and mimetype

        Raises:
            ImboClientError: If a property header is missing or malformed
        """
        headers = self.head_image(image_identifier).headers
        properties = {}
        for name, (header, convert) in IMAGE_PROPERTY_HEADERS.items():
            try:
                properties[name] = convert(headers[header])
            except (KeyError, ValueError):
                raise ImboClientError(f"Invalid or missing {header} header in response")
        return properties

    def get_image_data(self, image_identifier: str) -> bytes:
        """Raw bytes of the original image."""
        return self.get_image_data_from_url(self.get_image_url(image_identifier))

    def get_image_data_from_url(self, image_url: ImageUrl) -> bytes:
        """Raw bytes of an image, transformations applied by the server."""
        return self._make_request('GET', image_url, headers={'Accept': '*/*'}).content

    def get_num_images(self) -> int:
        return self.get_user_info().get('numImages', 0)

    def get_metadata(self, image_identifier: str) -> Dict[str, Any]:
        return self._make_request('GET', self.get_metadata_url(image_identifier)).json()

    def edit_metadata(self, image_identifier: str, metadata: Dict[str, Any]) -> Dict[str, Any]:
        """Merge metadata into the existing metadata of the image."""
        return self._make_request(
            'POST', self.get_metadata_url(image_identifier), json_data=metadata
        ).json()

    def replace_metadata(self, image_identifier: str, metadata: Dict[str, Any]) -> Dict[str, Any]:
        """Replace all metadata of the image."""
        return self._make_request(
            'PUT', self.get_metadata_url(image_identifier), json_data=metadata
        ).json()

    def delete_metadata(self, image_identifier: str) -> requests.Response:
        return self._make_request('DELETE', self.get_metadata_url(image_identifier))

    def get_short_url(self, image_url: ImageUrl) -> ShortUrl:
        """
        Create a short URL for an image URL, transformations included.

        Raises:
            ImboClientError: If the server response does not contain an id
        """
        query = image_url.get_query_string()
        payload = {
            'user': image_url.user,
            'imageIdentifier': image_url.image_identifier,
            'extension': image_url.extension,
            'query': f'?{query}' if query else None
        }
        body = self._make_request(
            'POST', self.get_short_urls_url(image_url.image_identifier), json_data=payload
        ).json()

        if not isinstance(body, dict) or not body.get('id'):
            raise ImboClientError("Short URL response did not contain an id")
        return ShortUrl(body['id'], self.get_host_for_image_identifier(image_url.image_identifier))

    def delete_all_short_urls_for_image(self, image_identifier: str) -> requests.Response:
        return self._make_request('DELETE', self.get_short_urls_url(image_identifier))

    def delete_short_url_for_image(self, image_identifier: str,
                                   short_id: ShortUrlLike) -> requests.Response:
        return self._make_request('DELETE', self.get_short_url_url(image_identifier, short_id))

    def get_resource_groups(self) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
        """
        List resource groups.

        Returns:
            Tuple of (groups, search) where search holds the paging information
        """
        body = self._make_request('GET', self.get_resource_groups_url()).json()
        return body.get('groups', []), body.get('search', {})

    def get_resource_group(self, name: str) -> List[str]:
        """Resources in the named group."""
        return self._make_request('GET', self.get_resource_group_url(name)).json().get('resources', [])

    def resource_group_exists(self, name: str) -> bool:
        return self._exists(self.get_resource_group_url(name))

    def add_resource_group(self, name: str, resources: List[str]) -> requests.Response:
        """
        Create a resource group.

        Raises:
            ResourceExistsError: If a group with the same name already exists
        """
        if self.resource_group_exists(name):
            raise ResourceExistsError(f"Resource group {name!r} already exists")
        return self.edit_resource_group(name, resources)

    def edit_resource_group(self, name: str, resources: List[str]) -> requests.Response:
        return self._make_request('PUT', self.get_resource_group_url(name), json_data=resources)

    def delete_resource_group(self, name: str) -> requests.Response:
        return self._make_request('DELETE', self.get_resource_group_url(name))

    def public_key_exists(self, public_key: str) -> bool:
        return self._exists(self.get_public_key_url(public_key))

    def add_public_key(self, public_key: str, private_key: str) -> requests.Response:
        """
        Create a public key with the given private key.

        Raises:
            ResourceExistsError: If the public key already exists
        """
        self._check_private_key(private_key)
        if self.public_key_exists(public_key):
            raise ResourceExistsError(f"Public key {public_key!r} already exists")
        return self.edit_public_key(public_key, private_key)

    def edit_public_key(self, public_key: str, private_key: str) -> requests.Response:
        """Set the private key of a public key, creating it if needed."""
        self._check_private_key(private_key)
        return self._make_request(
            'PUT', self.get_public_key_url(public_key), json_data={'privateKey': private_key}
        )

    def delete_public_key(self, public_key: str) -> requests.Response:
        return self._make_request('DELETE', self.get_public_key_url(public_key))

    @staticmethod
    def _check_private_key(private_key):
        if not isinstance(private_key, str) or not private_key:
            raise InvalidArgumentError("private key must be a non-empty string")

    def get_access_control_rules(self, public_key: str) -> List[Dict[str, Any]]:
        return self._make_request('GET', self.get_access_control_rules_url(public_key)).json()

    def get_access_control_rule(self, public_key: str, rule_id: Union[int, str]) -> Dict[str, Any]:
        return self._make_request('GET', self.get_access_control_rule_url(public_key, rule_id)).json()

    def add_access_control_rule(self, public_key: str,
                                rules: Union[Dict[str, Any], List[Dict[str, Any]]]) -> requests.Response:
        """
        Add access control rules to a public key.

        A single rule is sent as a list of one.
        """
        url = self.get_access_control_rules_url(public_key)
        if isinstance(rules, dict):
            rules = [rules]
        if not isinstance(rules, list) or not rules or not all(isinstance(r, dict) for r in rules):
            raise InvalidArgumentError("rules must be a rule dict or a non-empty list of rule dicts")
        return self._make_request('POST', url, json_data=rules)

    def delete_access_control_rule(self, public_key: str, rule_id: Union[int, str]) -> requests.Response:
        return self._make_request('DELETE', self.get_access_control_rule_url(public_key, rule_id))

    def close(self):
        """Close HTTP session."""
        if self.session:
            self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
