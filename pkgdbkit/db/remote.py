"""
Remote package database over HTTP.

The whole database is one JSON document (the same array encoding as
``StandardDB``) served at a URL:

- ``GET <url>`` reads it; 404 means the database does not exist
- ``PUT <url>`` replaces it; atomicity of the replacement is the server's
  responsibility
- creation on first use sends ``PUT`` with ``If-None-Match: *`` so an
  existing document is never overwritten by initialization

Only the registry document travels over the network; packages themselves
are never downloaded.
"""

import logging
from pathlib import Path
from typing import ClassVar, Optional, Type, Union

import requests
from requests.exceptions import RequestException

from pkgdbkit.core.exceptions import (
    DatabaseMissingError,
    DatabaseReadError,
    DatabaseWriteError,
)
from pkgdbkit.db.base import MaybeInitDB, PackageDB, validate_db_name
from pkgdbkit.db.standard import decode_packages, encode_packages
from pkgdbkit.packages.model import Packages

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json; charset=utf-8"}


class HttpDB(PackageDB):
    """
    Package database stored as a JSON document behind a URL.

    Attributes:
        url: Document URL
    """

    database_name: ClassVar[str] = "packages"
    global_url: ClassVar[Optional[str]] = None
    timeout: ClassVar[float] = 10.0

    def __init__(self, url: Union[str, Path]):
        self.url = str(url)

    @classmethod
    def db_name(cls) -> str:
        return cls.database_name

    def _get(self) -> requests.Response:
        try:
            return requests.get(
                self.url, headers={"Accept": "application/json"}, timeout=self.timeout
            )
        except RequestException as e:
            logger.debug(f"Failed to fetch package database {self.url}: {e}")
            raise DatabaseReadError(self.url, e) from e

    def _create_empty(self) -> None:
        headers = dict(JSON_HEADERS, **{"If-None-Match": "*"})
        try:
            response = requests.put(
                self.url, data=b"[]", headers=headers, timeout=self.timeout
            )
            if response.status_code == 412:
                logger.debug(f"Package database {self.url} was created concurrently")
                return
            response.raise_for_status()
        except RequestException as e:
            raise DatabaseWriteError(self.url, e) from e
        logger.info(f"Initialized empty package database at {self.url}")

    def read(self, init: MaybeInitDB) -> Packages:
        response = self._get()

        if response.status_code == 404:
            if init is not MaybeInitDB.INIT:
                raise DatabaseMissingError(self.url)
            self._create_empty()
            response = self._get()
            if response.status_code == 404:
                raise DatabaseMissingError(self.url)

        try:
            response.raise_for_status()
        except RequestException as e:
            raise DatabaseReadError(self.url, e) from e

        packages = decode_packages(response.content, self.url)
        logger.debug(f"Read {len(packages)} package(s) from {self.url}")
        return packages

    def write(self, packages: Packages) -> None:
        content = encode_packages(packages, indent=None).encode("utf-8")
        try:
            response = requests.put(
                self.url, data=content, headers=JSON_HEADERS, timeout=self.timeout
            )
            response.raise_for_status()
        except RequestException as e:
            logger.debug(f"Failed to write package database {self.url}: {e}")
            raise DatabaseWriteError(self.url, e) from e

        logger.debug(f"Wrote {len(packages)} package(s) to {self.url}")

    @classmethod
    def global_db(cls) -> Optional["HttpDB"]:
        if cls.global_url is None:
            return None
        return cls.from_path(cls.global_url)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "HttpDB":
        return cls(path)

    @property
    def location(self) -> str:
        return self.url


def http_db(
    name: str, global_url: Optional[str] = None, timeout: float = 10.0
) -> Type[HttpDB]:
    """
    Create an ``HttpDB`` subclass for a named database.

    Args:
        name: Database name (no path separators)
        global_url: URL of the global database, if there is one
        timeout: Request timeout in seconds
    """
    validate_db_name(name)
    return type(
        f"HttpDB_{name}",
        (HttpDB,),
        {"database_name": name, "global_url": global_url, "timeout": timeout},
    )
