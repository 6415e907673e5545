"""
Query for image listings.
"""

import calendar
import datetime
from typing import Iterable, List, Optional, Tuple, Union
from urllib.parse import quote

from .constants import DEFAULT_LIMIT, DEFAULT_PAGE, URL_COMPONENT_SAFE
from .exceptions import InvalidArgumentError

DateLike = Union[datetime.datetime, int]


def _positive_integer(value, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidArgumentError(f"{field} must be a positive integer, got {value!r}")
    return value


def _unix_timestamp(value: DateLike, field: str) -> int:
    if isinstance(value, datetime.datetime):
        # naive datetimes are taken as UTC
        return calendar.timegm(value.utctimetuple())
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    raise InvalidArgumentError(f"{field} must be a datetime or a Unix timestamp")


def _strings(values: Iterable[str], field: str) -> List[str]:
    if isinstance(values, str):
        values = [values]
    values = list(values)
    if not all(isinstance(value, str) and value for value in values):
        raise InvalidArgumentError(f"{field} must only contain non-empty strings")
    return values


class Query:
    """
    Filters, paging and sorting for the images resource.

    Setters return the query itself so calls can be chained::

        Query().limit(5).ids(['61da9892205a0d5077a353eb3487e8c8'])
    """

    def __init__(self):
        self._page = DEFAULT_PAGE
        self._limit = DEFAULT_LIMIT
        self._metadata = False
        self._from = None
        self._to = None
        self._fields = []
        self._sort = []
        self._ids = []
        self._checksums = []
        self._original_checksums = []
        self._users = []

    def page(self, page: int) -> 'Query':
        self._page = _positive_integer(page, 'page')
        return self

    def limit(self, limit: int) -> 'Query':
        self._limit = _positive_integer(limit, 'limit')
        return self

    def metadata(self, metadata: bool = True) -> 'Query':
        """Include image metadata in the response."""
        self._metadata = bool(metadata)
        return self

    def from_date(self, when: Optional[DateLike]) -> 'Query':
        self._from = None if when is None else _unix_timestamp(when, 'from')
        return self

    def to_date(self, when: Optional[DateLike]) -> 'Query':
        self._to = None if when is None else _unix_timestamp(when, 'to')
        return self

    def fields(self, fields: Iterable[str]) -> 'Query':
        self._fields = _strings(fields, 'fields')
        return self

    def sort(self, sort: Iterable[str]) -> 'Query':
        """Sort order, e.g. ['size:desc', 'width']."""
        self._sort = _strings(sort, 'sort')
        return self

    def ids(self, ids: Iterable[str]) -> 'Query':
        self._ids = _strings(ids, 'ids')
        return self

    def checksums(self, checksums: Iterable[str]) -> 'Query':
        self._checksums = _strings(checksums, 'checksums')
        return self

    def original_checksums(self, checksums: Iterable[str]) -> 'Query':
        self._original_checksums = _strings(checksums, 'original_checksums')
        return self

    def users(self, users: Iterable[str]) -> 'Query':
        self._users = _strings(users, 'users')
        return self

    def has_users(self) -> bool:
        return bool(self._users)

    def to_params(self) -> List[Tuple[str, object]]:
        params = [('page', self._page), ('limit', self._limit)]
        if self._metadata:
            params.append(('metadata', 1))
        if self._from is not None:
            params.append(('from', self._from))
        if self._to is not None:
            params.append(('to', self._to))

        for key, values in (('fields[]', self._fields),
                            ('sort[]', self._sort),
                            ('ids[]', self._ids),
                            ('checksums[]', self._checksums),
                            ('originalChecksums[]', self._original_checksums),
                            ('users[]', self._users)):
            params.extend((key, value) for value in values)
        return params

    def to_query_string(self) -> str:
        # List keys keep their literal [] suffix, values are fully encoded
        return '&'.join(f"{quote(key, safe='[]')}={quote(str(value), safe=URL_COMPONENT_SAFE)}"
                        for key, value in self.to_params())

    def __str__(self) -> str:
        return self.to_query_string()
