"""Embedded triple store on SQLite.

Triples are kept in a single ``triple`` table as N-Triples-serialized
terms.  Two views expose the statistics used by the suggestion engine:

``occurrence``
    ``(p, count)`` – number of distinct subjects using each predicate.
``cooccurrence``
    ``(p1, p2, count)`` – number of distinct subjects using both
    predicates, for every ordered pair of different predicates.

SPARQL queries are answered by :mod:`rdflib`'s query engine over a graph
materialized from the table.  The graph is cached and dropped on every
write.  Thread-safe via ``check_same_thread=False`` and a lock.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path
from typing import IO, Any, Iterable, Iterator, List, Optional, Set, Tuple, Union

import rdflib
from rdflib.query import Result
from rdflib.term import Identifier
from rdflib.util import from_n3

from rdfquery.decoders import ResultRow, decode_native_row
from rdfquery.exceptions import ResultDecodeError
from rdfquery.generators import QueryLanguage
from rdfquery.terms import Term, URIResource, as_term, to_rdflib

logger = logging.getLogger(__name__)

__all__ = [
    "LocalStore",
]

_DB_INIT_SQL = """
CREATE TABLE IF NOT EXISTS triple (
    s   TEXT NOT NULL,
    p   TEXT NOT NULL,
    o   TEXT NOT NULL,
    UNIQUE (s, p, o)
);

CREATE INDEX IF NOT EXISTS triple_sp ON triple (s, p);

DROP VIEW IF EXISTS occurrence;
CREATE VIEW occurrence AS
    SELECT p, count(DISTINCT s) AS count
    FROM triple
    GROUP BY p;

DROP VIEW IF EXISTS cooccurrence;
CREATE VIEW cooccurrence AS
    SELECT t0.p AS p1, t1.p AS p2, count(DISTINCT t0.s) AS count
    FROM triple AS t0
    JOIN triple AS t1 ON t0.s = t1.s AND t0.p != t1.p
    GROUP BY t0.p, t1.p;
"""

TripleLike = Tuple[Any, Any, Any]


def _serialize(value: Any) -> str:
    if isinstance(value, Identifier):
        return value.n3()
    return to_rdflib(as_term(value)).n3()


def _parse(value: str) -> Identifier:
    return from_n3(value)


class LocalStore:
    """SQLite-backed triple store answering SPARQL through rdflib."""

    query_language = QueryLanguage.SPARQL

    def __init__(self, db_path: Union[str, Path] = ":memory:") -> None:
        self.endpoint = str(db_path)
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(self.endpoint, check_same_thread=False)
        self._conn.executescript(_DB_INIT_SQL)
        self._conn.commit()
        self._graph: Optional[rdflib.Graph] = None
        self.revision = 0

    # -- writes ---------------------------------------------------------

    def add(self, subject: Any, predicate: Any, obj: Any) -> None:
        """Add one triple; duplicates are ignored."""
        self.add_many([(subject, predicate, obj)])

    def add_many(self, triples: Iterable[TripleLike]) -> int:
        """Add triples in one transaction. Returns the number inserted."""
        rows = [(_serialize(s), _serialize(p), _serialize(o)) for s, p, o in triples]
        with self._lock:
            before = self._conn.total_changes
            self._conn.executemany(
                "INSERT OR IGNORE INTO triple (s, p, o) VALUES (?, ?, ?)", rows,
            )
            self._conn.commit()
            inserted = self._conn.total_changes - before
            if inserted:
                self._changed()
        return inserted

    def remove(self, subject: Any = None, predicate: Any = None, obj: Any = None) -> int:
        """Remove triples matching the pattern; ``None`` is a wildcard."""
        clauses, params = self._pattern(subject, predicate, obj)
        sql = "DELETE FROM triple" + (f" WHERE {' AND '.join(clauses)}" if clauses else "")
        with self._lock:
            cur = self._conn.execute(sql, params)
            self._conn.commit()
            if cur.rowcount:
                self._changed()
        return cur.rowcount

    def load(
        self,
        source: Union[str, Path, IO[bytes]],
        format: Optional[str] = None,
    ) -> int:
        """Parse an RDF document with rdflib and add its triples."""
        graph = rdflib.Graph()
        graph.parse(source, format=format)
        inserted = self.add_many(graph)
        logger.info("Loaded %d triples from %s", inserted, source)
        return inserted

    def _changed(self) -> None:
        self._graph = None
        self.revision += 1

    # -- reads ----------------------------------------------------------

    @staticmethod
    def _pattern(subject: Any, predicate: Any, obj: Any) -> Tuple[List[str], List[str]]:
        clauses: List[str] = []
        params: List[str] = []
        for column, value in (("s", subject), ("p", predicate), ("o", obj)):
            if value is not None:
                clauses.append(f"{column} = ?")
                params.append(_serialize(value))
        return clauses, params

    def triples(
        self,
        subject: Any = None,
        predicate: Any = None,
        obj: Any = None,
    ) -> Iterator[Tuple[Identifier, Identifier, Identifier]]:
        """Yield rdflib triples matching the pattern."""
        clauses, params = self._pattern(subject, predicate, obj)
        sql = "SELECT s, p, o FROM triple" + (f" WHERE {' AND '.join(clauses)}" if clauses else "")
        with self._lock:
            rows = self._conn.execute(sql, params).fetchall()
        for s, p, o in rows:
            yield _parse(s), _parse(p), _parse(o)

    def size(self) -> int:
        """Number of triples in the store."""
        with self._lock:
            (count,) = self._conn.execute("SELECT count(*) FROM triple").fetchone()
        return count

    def __len__(self) -> int:
        return self.size()

    def direct_predicates(self, subject: Term) -> Set[URIResource]:
        """Predicates asserted directly on *subject*."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT DISTINCT p FROM triple WHERE s = ?", (_serialize(subject),),
            ).fetchall()
        return {URIResource(str(_parse(p))) for (p,) in rows}

    # -- statistics views -----------------------------------------------

    def occurrence_rows(self, min_count: int = 2) -> List[Tuple[URIResource, int]]:
        """Rows of the ``occurrence`` view with ``count >= min_count``."""
        with self._lock:
            rows = self._conn.execute(
                "SELECT p, count FROM occurrence WHERE count >= ?", (min_count,),
            ).fetchall()
        return [(URIResource(str(_parse(p))), int(count)) for p, count in rows]

    def cooccurrence_rows(self) -> List[Tuple[URIResource, URIResource, int]]:
        """All rows of the ``cooccurrence`` view."""
        with self._lock:
            rows = self._conn.execute("SELECT p1, p2, count FROM cooccurrence").fetchall()
        return [
            (URIResource(str(_parse(p1))), URIResource(str(_parse(p2))), int(count))
            for p1, p2, count in rows
        ]

    # -- querying -------------------------------------------------------

    def graph(self) -> rdflib.Graph:
        """The store content as an rdflib graph (cached until the next write)."""
        with self._lock:
            if self._graph is None:
                graph = rdflib.Graph()
                for triple in self.triples():
                    graph.add(triple)
                self._graph = graph
            return self._graph

    def query(self, query: str) -> List[ResultRow]:
        """Run a SPARQL SELECT query and decode the rows."""
        logger.debug("querying local store %s with:\n%s", self.endpoint, query)
        result: Result = self.graph().query(query)
        if result.type != "SELECT":
            raise ResultDecodeError(self.endpoint, f"expected SELECT results, got {result.type}")
        return [decode_native_row(row) for row in result]

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __repr__(self) -> str:
        return f"LocalStore({self.endpoint!r})"
