"""Command line interface for :mod:`rdfquery`."""

from typing import Optional

import click

from .adapters import BackendDescriptor, Engine, HttpAdapter, ResultFormat
from .config import Config
from .exceptions import RdfQueryError
from .generators import QueryLanguage
from .store import LocalStore
from .suggest import SuggestionEngine
from .terms import URIResource

__all__ = [
    "main",
]


def _format_node(node) -> str:
    return "" if node is None else node.n3()


@click.group()
@click.version_option()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """rdfquery - query heterogeneous RDF backends and suggest predicates."""
    import logging

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            force=True,
        )
        logging.getLogger("rdfquery").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s", force=True)


@main.command()
@click.option("--endpoint", default=lambda: Config.ENDPOINT, help="Endpoint URL")
@click.option(
    "--language",
    type=click.Choice([lang.value for lang in QueryLanguage]),
    default=lambda: Config.QUERY_LANGUAGE,
    help="Query language the endpoint speaks",
)
@click.option(
    "--results",
    type=click.Choice([fmt.value for fmt in ResultFormat]),
    default=lambda: Config.RESULT_FORMAT,
    help="Result format to request",
)
@click.option(
    "--engine",
    type=click.Choice([engine.value for engine in Engine]),
    default=None,
    help="Engine name, enables known quirks",
)
@click.option("--strip-distinct", is_flag=True, help="Remove DISTINCT before submitting")
@click.option("--timeout", type=float, default=None, help="Request timeout in seconds")
@click.argument("query_file", type=click.File("r"), default="-")
def query(
    endpoint: str,
    language: str,
    results: str,
    engine: Optional[str],
    strip_distinct: bool,
    timeout: Optional[float],
    query_file,
) -> None:
    """Run a raw query read from QUERY_FILE (default: stdin).

    Rows are printed tab-separated, one per line, in N-Triples notation.


    Example:
      echo 'SELECT ?s WHERE { ?s ?p ?o } LIMIT 5' | rdfquery query --endpoint https://dbpedia.org/sparql
    """
    if not endpoint:
        raise click.UsageError("--endpoint is required (or set RDFQUERY_ENDPOINT)")

    descriptor = BackendDescriptor(
        endpoint=endpoint,
        query_language=QueryLanguage(language),
        result_format=ResultFormat(results),
        engine=Engine(engine) if engine else None,
        strip_distinct_keyword=strip_distinct,
        timeout=timeout,
    )
    try:
        with HttpAdapter(descriptor) as adapter:
            count = adapter.query(
                query_file.read(),
                lambda row: click.echo("\t".join(_format_node(n) for n in row)),
            )
    except RdfQueryError as e:
        click.echo(f"Error: {e}", err=True)
        raise click.Abort()

    click.echo(f"{count} rows", err=True)


@main.command()
@click.option("--db", "db_path", required=True, help="SQLite file of the local store")
@click.option("--format", "rdf_format", default=None, help="RDF syntax (guessed if omitted)")
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
def load(db_path: str, rdf_format: Optional[str], source: str) -> None:
    """Load an RDF file into a local store.


    Example:
      rdfquery load --db people.db people.ttl
    """
    store = LocalStore(db_path)
    try:
        inserted = store.load(source, format=rdf_format)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        raise click.Abort()
    finally:
        store.close()

    click.echo(f"OK Loaded {inserted} triples into {db_path}")


@main.command()
@click.option("--db", "db_path", required=True, help="SQLite file of the local store")
@click.option("--limit", type=int, default=10, help="Maximum number of suggestions")
@click.argument("resource")
def suggest(db_path: str, limit: int, resource: str) -> None:
    """Suggest predicates for RESOURCE (a URI) from a local store.


    Example:
      rdfquery suggest --db people.db http://example.org/alice
    """
    store = LocalStore(db_path)
    try:
        suggestions = SuggestionEngine(store).suggest(URIResource(resource))
    finally:
        store.close()

    if not suggestions:
        click.echo("No suggestions")
        return

    ranked = sorted(suggestions, key=lambda s: s.score, reverse=True)
    for predicate, score in ranked[:limit]:
        click.echo(f"{score:.4f}\t{predicate.uri}")


if __name__ == "__main__":
    main()
