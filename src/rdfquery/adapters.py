"""Execute generated queries against remote backends and decode the results.

The :class:`HttpAdapter` speaks the SPARQL protocol (and the N3-QL
variant of YARS-style stores) over plain HTTP GET:

- the query is sent URL-escaped in the ``query`` parameter
- the ``Accept`` header follows the configured result format
- the body is streamed and decoded incrementally for XML formats
- transport failures raise :class:`BackendUnavailableError`, malformed
  bodies raise :class:`ResultDecodeError`; nothing is retried here

Usage:
    from rdfquery.adapters import BackendDescriptor, HttpAdapter

    adapter = HttpAdapter(BackendDescriptor(endpoint="https://dbpedia.org/sparql"))
    rows = adapter.query("SELECT ?s WHERE { ?s a ?t } LIMIT 10")
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Any, Callable, Iterator, List, Optional, Union, overload

import requests
from pydantic import BaseModel, ConfigDict, Field, model_validator

from rdfquery.decoders import ResultRow, decode_json, iter_xml
from rdfquery.exceptions import BackendUnavailableError
from rdfquery.generators import QueryLanguage

logger = logging.getLogger(__name__)

__all__ = [
    "BackendDescriptor",
    "Engine",
    "HttpAdapter",
    "MimeTypes",
    "ResultFormat",
]


class ResultFormat(str, Enum):
    """Result encodings a remote backend can be asked for."""

    JSON = "json"
    XML = "xml"
    SPARQL_XML = "sparql-xml"

    @classmethod
    def _missing_(cls, value: object) -> Optional["ResultFormat"]:
        if isinstance(value, str) and value.replace("_", "-") == cls.SPARQL_XML.value:
            return cls.SPARQL_XML
        return None


class Engine(str, Enum):
    """Known SPARQL engines and their quirks."""

    YARS2 = "yars2"
    SESAME2 = "sesame2"
    JOSEKI = "joseki"
    VIRTUOSO = "virtuoso"


class MimeTypes:
    """Accept headers for each :class:`ResultFormat`."""

    JSON = "application/sparql-results+json"
    RDFXML = "application/rdf+xml"
    XML = "application/sparql-results+xml"

    BY_FORMAT = {
        ResultFormat.JSON: JSON,
        ResultFormat.XML: RDFXML,
        ResultFormat.SPARQL_XML: XML,
    }


class BackendDescriptor(BaseModel):
    """Connection settings for one backend."""

    endpoint: str = Field(..., description="Endpoint URL")
    query_language: QueryLanguage = Field(QueryLanguage.SPARQL, description="Query language")
    result_format: ResultFormat = Field(ResultFormat.JSON, description="Requested result encoding")
    strip_distinct_keyword: bool = Field(
        False, description="Remove DISTINCT before submitting (for engines that reject it)"
    )
    engine: Optional[Engine] = Field(None, description="Engine name, enables known quirks")
    timeout: Optional[float] = Field(None, gt=0, description="Request timeout in seconds")

    model_config = ConfigDict(extra="forbid")

    @model_validator(mode="after")
    def apply_engine_quirks(self) -> "BackendDescriptor":
        if self.engine is Engine.YARS2:
            self.strip_distinct_keyword = True
        return self


_DISTINCT_RE = re.compile(r"\bDISTINCT\b\s*")


class HttpAdapter:
    """Submit queries to an HTTP endpoint and decode its answers.

    Attributes:
        descriptor: The backend settings.
        query_language: Language the backend expects, used by
            :meth:`rdfquery.query.Query.execute` to pick a generator.
    """

    USER_AGENT = "rdfquery/1.0 (SPARQL client)"
    CHUNK_SIZE = 64 * 1024

    def __init__(self, descriptor: BackendDescriptor) -> None:
        self.descriptor = descriptor
        self.endpoint = descriptor.endpoint
        self.query_language = descriptor.query_language
        self._session = requests.Session()
        logger.info("HTTP adapter initialised %r", self)

    @overload
    def query(self, query: str) -> List[ResultRow]: ...

    @overload
    def query(self, query: str, callback: Callable[[ResultRow], Any]) -> int: ...

    def query(
        self,
        query: str,
        callback: Optional[Callable[[ResultRow], Any]] = None,
    ) -> Union[List[ResultRow], int]:
        """Execute *query* and return all decoded rows.

        If *callback* is given it is called once per row as rows are
        decoded, and the number of rows is returned instead of a list.
        """
        if callback is None:
            return list(self.iter_query(query))
        count = 0
        for row in self.iter_query(query):
            callback(row)
            count += 1
        return count

    def iter_query(self, query: str) -> Iterator[ResultRow]:
        """Execute *query* and yield decoded rows as they arrive.

        Closing the iterator early releases the underlying connection.
        """
        response = self._submit(self.prepare(query))
        try:
            if self.descriptor.result_format is ResultFormat.JSON:
                yield from decode_json(self._read_body(response), endpoint=self.endpoint)
            else:
                yield from iter_xml(self._iter_body(response), endpoint=self.endpoint)
        finally:
            response.close()

    def prepare(self, query: str) -> str:
        """Apply backend compatibility rewrites to a query string."""
        if self.descriptor.strip_distinct_keyword:
            query = _DISTINCT_RE.sub("", query)
        return query

    def _submit(self, query: str) -> requests.Response:
        headers = {
            "Accept": MimeTypes.BY_FORMAT[self.descriptor.result_format],
            "User-Agent": self.USER_AGENT,
        }
        logger.debug("querying %s with:\n%s", self.endpoint, query)
        try:
            response = self._session.get(
                self.endpoint,
                params={"query": query},
                headers=headers,
                timeout=self.descriptor.timeout,
                stream=True,
            )
        except requests.exceptions.RequestException as exc:
            raise BackendUnavailableError(self.endpoint, exc) from exc

        if not 200 <= response.status_code < 300:
            reason = response.reason or "request failed"
            response.close()
            raise BackendUnavailableError(self.endpoint, reason, status=response.status_code)
        return response

    def _read_body(self, response: requests.Response) -> bytes:
        try:
            return response.content
        except requests.exceptions.RequestException as exc:
            raise BackendUnavailableError(self.endpoint, exc) from exc

    def _iter_body(self, response: requests.Response) -> Iterator[bytes]:
        try:
            yield from response.iter_content(chunk_size=self.CHUNK_SIZE)
        except requests.exceptions.RequestException as exc:
            raise BackendUnavailableError(self.endpoint, exc) from exc

    def close(self) -> None:
        """Close the underlying requests session."""
        self._session.close()

    def __enter__(self) -> "HttpAdapter":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"HttpAdapter({self.endpoint!r}, language={self.query_language.value}, "
            f"results={self.descriptor.result_format.value})"
        )

