"""Query commands."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from timeline_db.config import ReaderConfig
from timeline_db.constants import DEFAULT_LIMIT, Field
from timeline_db.exceptions import TimelineReaderError
from timeline_db.models.query import Projection
from timeline_db.models.schemas import EntityFiltersInput, QueryContextInput
from timeline_db.repository import FileSystemTimelineReader
from timeline_db.utils.time import to_epoch_millis

console = Console()

query_app = typer.Typer(
    name="query",
    help="Query entities from a timeline store",
    no_args_is_help=True,
)

RootOption = Annotated[
    Optional[Path],
    typer.Option("--root", "-r", help="Storage root (default: $TIMELINE_DB_STORAGE_ROOT)"),
]
EnvFileOption = Annotated[
    Optional[Path],
    typer.Option("--env-file", "-e", help="Path to .env file to load"),
]
UserOption = Annotated[Optional[str], typer.Option("--user", help="Flow owner")]
FlowOption = Annotated[Optional[str], typer.Option("--flow", help="Flow name")]
FlowRunOption = Annotated[Optional[int], typer.Option("--flow-run", help="Flow run id")]
FieldsOption = Annotated[
    Optional[list[Field]],
    typer.Option(
        "--fields",
        "-f",
        case_sensitive=False,
        help="Field groups to return (repeatable)",
    ),
]


def _load_config(root: Path | None, env_file: Path | None, **kwargs) -> ReaderConfig:
    if env_file:
        if not env_file.exists():
            console.print(f"[bold red]Error:[/bold red] Environment file not found: {env_file}")
            raise typer.Exit(code=1)
        load_dotenv(env_file, override=True, interpolate=True)
    if root is None:
        return ReaderConfig(**kwargs)
    return ReaderConfig(root_path=root, **kwargs)


def _projection(fields: list[Field] | None) -> Projection | None:
    if not fields:
        return None
    return Projection.of(*fields)


def _fail(message: str, error: Exception) -> None:
    console.print(f"[bold red]{message}:[/bold red] {escape(str(error))}")
    raise typer.Exit(code=1)


@query_app.command(name="entity")
def query_entity(
    cluster_id: Annotated[str, typer.Argument(help="Cluster id")],
    app_id: Annotated[str, typer.Argument(help="Application id")],
    entity_type: Annotated[str, typer.Argument(help="Entity type")],
    entity_id: Annotated[str, typer.Argument(help="Entity id")],
    user: UserOption = None,
    flow: FlowOption = None,
    flow_run: FlowRunOption = None,
    fields: FieldsOption = None,
    root: RootOption = None,
    env_file: EnvFileOption = None,
) -> None:
    """
    Fetch a single entity and print it as JSON.

    Exits with code 1 if the entity does not exist.
    """
    config = _load_config(root, env_file)
    try:
        context = QueryContextInput(
            cluster_id=cluster_id,
            app_id=app_id,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user,
            flow_name=flow,
            flow_run_id=flow_run,
        ).to_context()
    except ValidationError as e:
        _fail("Invalid query", e)

    reader = FileSystemTimelineReader.from_config(config)
    try:
        entity = reader.get_entity(context, _projection(fields))
    except (TimelineReaderError, OSError) as e:
        _fail("Query failed", e)

    if entity is None:
        console.print(f"[yellow]Entity not found:[/yellow] {entity_type}/{entity_id}")
        raise typer.Exit(code=1)

    typer.echo(reader.codec.encode(entity))


@query_app.command(name="entities")
def query_entities(
    cluster_id: Annotated[str, typer.Argument(help="Cluster id")],
    app_id: Annotated[str, typer.Argument(help="Application id")],
    entity_type: Annotated[str, typer.Argument(help="Entity type")],
    user: UserOption = None,
    flow: FlowOption = None,
    flow_run: FlowRunOption = None,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum results")] = DEFAULT_LIMIT,
    created_after: Annotated[
        Optional[str],
        typer.Option("--created-after", help="Earliest created time (epoch ms or ISO-8601)"),
    ] = None,
    created_before: Annotated[
        Optional[str],
        typer.Option("--created-before", help="Latest created time (epoch ms or ISO-8601)"),
    ] = None,
    info: Annotated[
        Optional[list[str]], typer.Option("--info", help="Info filter key=value (repeatable)")
    ] = None,
    config_filter: Annotated[
        Optional[list[str]],
        typer.Option("--config", help="Config filter key=value (repeatable)"),
    ] = None,
    metric: Annotated[
        Optional[list[str]], typer.Option("--metric", help="Required metric id (repeatable)")
    ] = None,
    event: Annotated[
        Optional[list[str]], typer.Option("--event", help="Required event id (repeatable)")
    ] = None,
    relates_to: Annotated[
        Optional[list[str]],
        typer.Option("--relates-to", help="Relation filter type:id1,id2 (repeatable)"),
    ] = None,
    is_related_to: Annotated[
        Optional[list[str]],
        typer.Option("--is-related-to", help="Relation filter type:id1,id2 (repeatable)"),
    ] = None,
    fields: FieldsOption = None,
    as_json: Annotated[
        bool, typer.Option("--json", help="Print JSON lines instead of a table")
    ] = False,
    skip_corrupt: Annotated[
        bool, typer.Option("--skip-corrupt", help="Skip undecodable entity files")
    ] = False,
    root: RootOption = None,
    env_file: EnvFileOption = None,
) -> None:
    """
    Query entities of one type under an application.

    Results are ordered by descending created time.
    """
    config = _load_config(root, env_file, skip_corrupt=skip_corrupt)
    try:
        context = QueryContextInput(
            cluster_id=cluster_id,
            app_id=app_id,
            entity_type=entity_type,
            user_id=user,
            flow_name=flow,
            flow_run_id=flow_run,
        ).to_context()
        filter_args = {
            "limit": limit,
            "info_filters": info,
            "config_filters": config_filter,
            "metric_filters": metric,
            "event_filters": event,
            "relates_to": relates_to,
            "is_related_to": is_related_to,
        }
        if created_after is not None:
            filter_args["created_time_begin"] = to_epoch_millis(created_after)
        if created_before is not None:
            filter_args["created_time_end"] = to_epoch_millis(created_before)
        filters = EntityFiltersInput(**filter_args).to_filters()
    except (ValidationError, ValueError) as e:
        _fail("Invalid query", e)

    reader = FileSystemTimelineReader.from_config(config)
    projection = _projection(fields)
    try:
        if as_json:
            for entity in reader.get_entities(context, filters, projection):
                typer.echo(reader.codec.encode(entity))
            return
        df = reader.get_entities_table(context, filters, projection)
    except (TimelineReaderError, OSError) as e:
        _fail("Query failed", e)

    if df.empty:
        console.print("[yellow]No entities found[/yellow]")
        return

    table = Table(title=f"{entity_type} ({len(df)} results)")
    for column in df.columns:
        table.add_column(str(column), style="cyan" if column in ("type", "id") else None)
    for row in df.itertuples(index=False):
        table.add_row(*(str(value) for value in row))
    console.print(table)


@query_app.command(name="resolve")
def resolve_flow(
    cluster_id: Annotated[str, typer.Argument(help="Cluster id")],
    app_id: Annotated[str, typer.Argument(help="Application id")],
    user: UserOption = None,
    flow: FlowOption = None,
    flow_run: FlowRunOption = None,
    root: RootOption = None,
    env_file: EnvFileOption = None,
) -> None:
    """
    Print the flow run path (user/flow/flowrun) of an application.
    """
    config = _load_config(root, env_file)
    reader = FileSystemTimelineReader.from_config(config)
    try:
        flow_run_path = reader.resolver.resolve(
            cluster_id, app_id, user_id=user, flow_name=flow, flow_run_id=flow_run
        )
    except TimelineReaderError as e:
        _fail("Resolution failed", e)
    typer.echo(flow_run_path)
