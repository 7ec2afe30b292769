"""Operator CLI for the ranking and recommendation engine."""

import json
import sys
import uuid
from dataclasses import dataclass

import click
import structlog

from rankflow.graph import Neo4jGraphStore
from rankflow.observability.logging import (
    bind_job_context,
    clear_job_context,
    configure_logging,
)
from rankflow.ranking import ArticleRankingEngine, RebuildResult, UserRankingEngine
from rankflow.scores import RedisScoreStore, ScoreStore
from rankflow.settings import AppSettings, get_settings
from rankflow.sync import (
    ContentSource,
    ContentSourceError,
    GraphSyncPipeline,
    load_content_source,
)


logger = structlog.get_logger()

COMPONENT_CLI = "cli"


@dataclass
class CliContext:
    """State shared by every command of one invocation."""

    settings: AppSettings


def _build_score_store(settings: AppSettings) -> ScoreStore:
    return RedisScoreStore.from_url(settings.redis_url)


def _build_graph_store(settings: AppSettings) -> Neo4jGraphStore:
    return Neo4jGraphStore.from_settings(settings)


def _load_source(settings: AppSettings) -> ContentSource:
    """Load the configured content source, exit on failure."""
    try:
        return load_content_source(settings.content_source)
    except ContentSourceError as e:
        logger.error("content_source_load_failed", component=COMPONENT_CLI, error=e.message)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _job_log(job: str) -> structlog.typing.FilteringBoundLogger:
    return logger.bind(component=COMPONENT_CLI, command=job)  # type: ignore[no-any-return]


def _article_engine(settings: AppSettings, source: ContentSource) -> ArticleRankingEngine:
    return ArticleRankingEngine(
        _build_score_store(settings),
        source,
        ttl_seconds=settings.ranking_ttl_seconds,
        batch_size=settings.sync_batch_size,
    )


def _user_engine(settings: AppSettings, source: ContentSource) -> UserRankingEngine:
    return UserRankingEngine(
        _build_score_store(settings),
        source,
        source,
        source,
        ttl_seconds=settings.ranking_ttl_seconds,
        batch_size=settings.sync_batch_size,
    )


def _report_rebuild(name: str, result: RebuildResult) -> None:
    if result.completed:
        click.echo(f"{name} ranking synced: {result.entries_written} entries written.")
        return
    click.echo(
        f"{name} ranking sync incomplete: {result.entries_written} entries written "
        "before the score store failed.",
        err=True,
    )
    sys.exit(1)


@click.group()
@click.version_option(version="0.1.0")
@click.option(
    "--log-level",
    default=None,
    help="Logging level (default: LOG_LEVEL or INFO).",
)
@click.option(
    "--json-logs/--console-logs",
    "json_logs",
    default=None,
    help="Emit JSON logs (default: LOG_JSON).",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None, json_logs: bool | None) -> None:
    """Ranking and recommendation engine CLI."""
    settings = get_settings()
    if log_level is not None:
        settings = settings.model_copy(update={"log_level": log_level})
    if json_logs is not None:
        settings = settings.model_copy(update={"log_json": json_logs})

    configure_logging(level=settings.log_level_value, json_format=settings.log_json)
    ctx.obj = CliContext(settings=settings)
    bind_job_context(str(uuid.uuid4()), ctx.invoked_subcommand or "rankflow")
    ctx.call_on_close(clear_job_context)


@cli.command("sync-articles")
@click.pass_obj
def sync_articles(obj: CliContext) -> None:
    """Rebuild the article views leaderboard from the content store."""
    log = _job_log("sync-articles")
    source = _load_source(obj.settings)
    result = _article_engine(obj.settings, source).sync_from_database()
    log.info("sync_articles_finished", **vars(result))
    _report_rebuild("Article", result)


@cli.command("sync-users")
@click.pass_obj
def sync_users(obj: CliContext) -> None:
    """Recompute every influence score and rebuild the user leaderboard."""
    log = _job_log("sync-users")
    source = _load_source(obj.settings)
    result = _user_engine(obj.settings, source).sync_from_database()
    log.info("sync_users_finished", **vars(result))
    _report_rebuild("User", result)


@cli.command("sync-graph")
@click.option(
    "--clear",
    is_flag=True,
    help="Delete every node and relationship before syncing.",
)
@click.pass_obj
def sync_graph(obj: CliContext, clear: bool) -> None:
    """Rebuild the recommendation graph from the content store.

    Exits with status 1 when Neo4j is unreachable or the run stopped early.
    """
    log = _job_log("sync-graph")
    source = _load_source(obj.settings)

    with _build_graph_store(obj.settings) as graph:
        if not graph.is_connected():
            click.echo("Error: Neo4j is not available.", err=True)
            sys.exit(1)

        if clear:
            click.echo("Clearing the graph before sync...")
        sync_stats = GraphSyncPipeline(graph, source).sync_from_database(clear=clear)

    log.info("sync_graph_finished", **sync_stats.to_dict())
    click.echo("Graph sync results:")
    click.echo(f"  Users:    {sync_stats.users}")
    click.echo(f"  Articles: {sync_stats.articles}")
    click.echo(f"  Follows:  {sync_stats.follows}")
    click.echo(f"  Likes:    {sync_stats.likes}")
    click.echo(f"  Failed:   {sync_stats.failed}")
    if not sync_stats.completed:
        click.echo("Graph sync stopped before completion.", err=True)
        sys.exit(1)


@cli.command("top")
@click.argument("board", type=click.Choice(["articles", "users"]))
@click.option("--limit", default=10, show_default=True, type=click.IntRange(min=1))
@click.pass_obj
def top(obj: CliContext, board: str, limit: int) -> None:
    """Show the top of a leaderboard with titles or names."""
    source = _load_source(obj.settings)

    if board == "articles":
        articles = _article_engine(obj.settings, source).get_enriched_top_articles(limit)
        for article_entry in articles:
            title = article_entry.article.title if article_entry.article else "(deleted)"
            click.echo(f"{article_entry.rank:>3}. {title} - {article_entry.views} views")
        return

    for user_entry in _user_engine(obj.settings, source).get_enriched_top_users(limit):
        name = f"@{user_entry.user.username}" if user_entry.user else "(deleted)"
        click.echo(f"{user_entry.rank:>3}. {name} - {user_entry.score:.2f}")


@cli.command("stats")
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output as JSON.",
)
@click.pass_obj
def stats(obj: CliContext, json_output: bool) -> None:
    """Display leaderboard and graph statistics."""
    source = _load_source(obj.settings)
    article_stats = _article_engine(obj.settings, source).get_statistics()
    user_stats = _user_engine(obj.settings, source).get_statistics()

    with _build_graph_store(obj.settings) as graph:
        available = graph.is_connected()
        graph_stats = graph.statistics()

    if json_output:
        output = {
            "articles": article_stats.to_dict(),
            "users": user_stats.to_dict(),
            "graph": {"available": available, **graph_stats.to_dict()},
        }
        click.echo(json.dumps(output, indent=2))
        return

    click.echo("Ranking Statistics")
    click.echo("=" * 40)
    click.echo(f"  Ranked articles: {article_stats.total_articles}")
    click.echo(f"  Total views:     {article_stats.total_views:.0f}")
    click.echo(f"  Top views:       {article_stats.top_score:.0f}")
    click.echo(f"  Ranked users:    {user_stats.total_users}")
    click.echo(f"  Average score:   {user_stats.average_score:.2f}")
    click.echo(f"  Top score:       {user_stats.top_score:.2f}")
    click.echo("")
    if not available:
        click.echo("Graph: unavailable")
        return
    click.echo("Graph Counts:")
    for name, count in graph_stats.to_dict().items():
        click.echo(f"  {name}: {count}")


@cli.command("graph-status")
@click.pass_obj
def graph_status(obj: CliContext) -> None:
    """Probe Neo4j; exit with status 1 when it is unreachable."""
    with _build_graph_store(obj.settings) as graph:
        available = graph.is_connected()

    if available:
        click.echo("Neo4j: available")
        return
    click.echo("Neo4j: unavailable", err=True)
    sys.exit(1)


if __name__ == "__main__":
    cli()
