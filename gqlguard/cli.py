"""CLI interface for gqlguard."""

import click
import logging
from pathlib import Path
from typing import Optional, Tuple

from graphql import GraphQLError, OperationDefinitionNode, build_schema

from .core import QueryGuard
from .exceptions import QueryGuardError, QueryLoadError
from .validation import build_fragment_index, count_aliases, measure_depth


def _read(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise QueryLoadError(f"Could not read {path}: {e.strerror}", path=path) from e


def _report_error(e: QueryGuardError, verbose: bool) -> None:
    click.echo(f"\n❌ {e.error_code}: {e.message}", err=True)
    if e.where:
        click.echo(f"📍 Where: {e.where}", err=True)
    if e.suggestions:
        click.echo("\n💡 Suggestions:", err=True)
        for suggestion in e.suggestions:
            click.echo(f"   • {suggestion}", err=True)
    if verbose:
        click.echo(f"\n🔍 Correlation ID: {e.correlation_id}", err=True)


def _format_violation(error: GraphQLError) -> str:
    if error.locations:
        location = error.locations[0]
        return f"{error.message} (line {location.line}, column {location.column})"
    return error.message


@click.group()
def cli():
    """gqlguard - alias and depth limits for GraphQL queries."""
    pass


@cli.command()
@click.argument('query_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--schema', 'schema_file', default=None, type=click.Path(exists=True, dir_okay=False),
              help='SDL schema file; enables the standard validation rules')
@click.option('--max-aliases', default=None, type=click.IntRange(min=0), help='Maximum number of aliases')
@click.option('--allow-alias', multiple=True, help='Alias that is not counted (repeatable)')
@click.option('--max-depth', default=None, type=click.IntRange(min=0), help='Maximum query depth')
@click.option('--flatten-fragments', is_flag=True, help='Fragments add no depth level')
@click.option('--ignore-introspection', is_flag=True, help='Skip pure introspection operations')
@click.option('--hide-limits', is_flag=True, help='Report a generic message instead of the limits')
@click.option('--verbose', '-v', is_flag=True, help='Verbose output')
def check(query_file: str, schema_file: Optional[str], max_aliases: Optional[int],
          allow_alias: Tuple[str, ...], max_depth: Optional[int], flatten_fragments: bool,
          ignore_introspection: bool, hide_limits: bool, verbose: bool):
    """Check a query file against the configured limits."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

    guard = QueryGuard(
        max_aliases=max_aliases,
        allow_aliases=allow_alias,
        max_depth=max_depth,
        flatten_fragments=flatten_fragments,
        ignore_introspection=ignore_introspection,
        expose_limits=not hide_limits
    )

    try:
        source = _read(query_file)
        if schema_file:
            try:
                schema = build_schema(_read(schema_file))
            except (GraphQLError, TypeError) as e:
                raise QueryLoadError(f"Invalid schema: {e}", path=schema_file) from e
            errors = guard.validate(schema, source)
        else:
            errors = guard.check(source)
    except QueryGuardError as e:
        _report_error(e, verbose)
        raise click.Abort()

    if errors:
        click.echo(f"❌ {query_file}: {len(errors)} error(s)")
        for error in errors:
            click.echo(f"   • {_format_violation(error)}")
        raise click.exceptions.Exit(1)

    click.echo(f"✅ {query_file}: OK")


@cli.command()
@click.argument('query_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--allow-alias', multiple=True, help='Alias that is not counted (repeatable)')
@click.option('--flatten-fragments', is_flag=True, help='Fragments add no depth level')
def measure(query_file: str, allow_alias: Tuple[str, ...], flatten_fragments: bool):
    """Print the alias count and the depth of every operation."""
    try:
        document = QueryGuard().parse(_read(query_file))
    except QueryGuardError as e:
        _report_error(e, verbose=False)
        raise click.Abort()

    fragments = build_fragment_index(document)
    click.echo(f"Aliases: {count_aliases(document, allow_alias).count}")
    for definition in document.definitions:
        if isinstance(definition, OperationDefinitionNode):
            name = definition.name.value if definition.name else "<anonymous>"
            depth = measure_depth(definition, fragments, flatten_fragments)
            click.echo(f"Depth of {definition.operation.value} {name}: {depth}")


if __name__ == '__main__':
    cli()
