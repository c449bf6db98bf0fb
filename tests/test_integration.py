"""Live endpoint tests.

Set ``RDFQUERY_TEST_ENDPOINT`` to a public SPARQL endpoint to run them,
e.g. ``https://dbpedia.org/sparql``.
"""

import logging
import os

import pytest

from rdfquery.adapters import BackendDescriptor, HttpAdapter, ResultFormat
from rdfquery.query import Query
from rdfquery.terms import URIResource, Variable

logger = logging.getLogger(__name__)

ENDPOINT = os.getenv("RDFQUERY_TEST_ENDPOINT", "")

pytestmark = pytest.mark.skipif(not ENDPOINT, reason="RDFQUERY_TEST_ENDPOINT not set")

RDF_TYPE = URIResource("http://www.w3.org/1999/02/22-rdf-syntax-ns#type")


@pytest.mark.integration
@pytest.mark.parametrize("result_format", list(ResultFormat))
def test_select_types(result_format):
    descriptor = BackendDescriptor(endpoint=ENDPOINT, result_format=result_format, timeout=60)
    s, t = Variable("s"), Variable("t")
    q = Query().add_binding_variables(s, t).add_condition(s, RDF_TYPE, t)

    with HttpAdapter(descriptor) as adapter:
        # LIMIT is not part of the query model, close the stream early instead
        rows = adapter.iter_query(q.generate(adapter.query_language))
        first = [row for _, row in zip(range(5), rows)]
        rows.close()

    logger.info("first rows from %s: %s", ENDPOINT, first)
    assert first, "Expected at least one typed resource"
    assert all(len(row) == 2 for row in first)
