# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Resource URIs for table schemas.

Each table is exposed as ``postgres://<host>[:<port>]/<table>/schema``.
Host and port come from the connection string; user and password are
never part of the URI. The table segment is percent-encoded so that
names containing "/" or spaces survive the round trip.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote, unquote, urlsplit

import psycopg
from psycopg.conninfo import conninfo_to_dict

from .errors import ConfigurationError, InvalidResourceURIError

RESOURCE_SCHEME = "postgres"
SCHEMA_PATH = "schema"


@dataclass(frozen=True)
class ResourceLocator:
    """Builds and parses schema resource URIs for one database host.

    Attributes:
        host: Database host as written in the connection string.
        port: Port, or None when the connection string has none.
    """

    host: str
    port: str | None = None

    @classmethod
    def from_database_url(cls, database_url: str) -> ResourceLocator:
        """Extract host and port, dropping credentials.

        Accepts URLs and libpq key=value DSNs. With several hosts listed
        the first one is used; a missing host (unix socket) is "localhost".

        Raises:
            ConfigurationError: If the connection string cannot be parsed.
        """
        try:
            params = conninfo_to_dict(database_url)
        except psycopg.ProgrammingError as e:
            raise ConfigurationError(f"Invalid connection string: {e}") from e

        host = str(params.get("host") or "").split(",")[0]
        if not host or host.startswith("/"):
            host = "localhost"
        port = str(params.get("port") or "").split(",")[0] or None
        return cls(host=host, port=port)

    @property
    def base_url(self) -> str:
        """Scheme and authority shared by every resource URI."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        authority = f"{host}:{self.port}" if self.port else host
        return f"{RESOURCE_SCHEME}://{authority}"

    def uri_for(self, table: str) -> str:
        """Return the schema resource URI of table."""
        return f"{self.base_url}/{quote(table, safe='')}/{SCHEMA_PATH}"

    def table_from_uri(self, uri: str) -> str:
        """Return the table name encoded in a schema resource URI.

        Raises:
            InvalidResourceURIError: If the path is not <table>/schema.
        """
        try:
            path = urlsplit(str(uri)).path
        except ValueError:
            raise InvalidResourceURIError(str(uri)) from None

        segments = path.split("/")
        marker = segments.pop() if segments else ""
        table = segments.pop() if segments else ""
        if marker != SCHEMA_PATH or not table:
            raise InvalidResourceURIError(str(uri))
        return unquote(table)


__all__ = ["RESOURCE_SCHEME", "SCHEMA_PATH", "ResourceLocator"]
