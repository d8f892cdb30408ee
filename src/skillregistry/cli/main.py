"""
skillregistry command line: list, show, query, prepare, index, validate, config.

Every command accepts --json and then writes only JSON to stdout.
"""

import json as _json
import pathlib as _pathlib
import typing as _typing

import click as _click
import pydantic as _pydantic
import rich.console as _rich_console
import rich.table as _rich_table

import skillregistry
import skillregistry.config as config
import skillregistry.constants as constants
import skillregistry.logging as srlogging
import skillregistry.skills as skills
import skillregistry.skills.preprocessor as preprocessor

CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}


def _fail(message: str, *, json_output: bool = False) -> _typing.NoReturn:
    """Report an error and exit with status 1."""
    if json_output:
        _click.echo(_json.dumps({"error": message}))
    else:
        _click.echo(f"Error: {message}", err=True)
    raise SystemExit(1)


def _get_registry(ctx: _click.Context) -> skills.SkillRegistry:
    """Build the registry once per invocation from the context settings."""
    obj = ctx.obj
    if obj.get("registry") is None:
        settings: config.Settings = obj["settings"]
        event_logger = srlogging.create_event_logger(settings)
        ctx.call_on_close(event_logger.close)
        try:
            obj["registry"] = skills.SkillRegistry.from_settings(
                settings,
                event_logger=event_logger,
            )
        except skills.SkillRegistryError as e:
            _fail(str(e))
    return obj["registry"]


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(skillregistry.__version__, "-v", "--version", prog_name="skillregistry")
@_click.option("--verbose", is_flag=True, help="Enable debug logging")
@_click.option(
    "--skill-path",
    "skill_paths",
    multiple=True,
    type=_click.Path(file_okay=False, path_type=_pathlib.Path),
    help="Extra skill search path (repeatable, highest priority)",
)
@_click.option("--no-builtin", is_flag=True, help="Do not load the bundled skills")
@_click.pass_context
def cli(
    ctx: _click.Context,
    verbose: bool,
    skill_paths: tuple[_pathlib.Path, ...],
    no_builtin: bool,
) -> None:
    """skillregistry - find the guidance documents relevant to your task."""
    try:
        settings = config.Settings()
    except (config.ConfigFileError, _pydantic.ValidationError) as e:
        _fail(str(e))

    if skill_paths:
        settings.discovery.extra_paths = [
            *settings.discovery.extra_paths,
            *(str(p) for p in skill_paths),
        ]
    if no_builtin:
        settings.discovery.include_builtin = False

    srlogging.configure_logging(settings.logging.level, verbose=verbose)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["registry"] = None


@cli.command(name="list")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def list_command(ctx: _click.Context, json_output: bool) -> None:
    """List all discovered skills."""
    registry = _get_registry(ctx)
    records = registry.list_skills()

    if json_output:
        _click.echo(_json.dumps(registry.to_dict(), indent=2))
        return

    _click.echo("Skill Discovery Paths:")
    for path in registry.search_paths:
        exists = "✓" if path.exists() else "(not found)"
        _click.echo(f"  {path} {exists}")
    _click.echo()

    if not records:
        _click.echo("No skills found.")
        return

    table = _rich_table.Table(title=f"Discovered Skills ({len(records)})")
    table.add_column("Id", no_wrap=True)
    table.add_column("Name")
    table.add_column("Lines", justify="right")
    table.add_column("Source")
    for record in records:
        lines = f"{record.body_line_count}{' ⚠' if record.exceeds_soft_limit else ''}"
        table.add_row(record.id, record.name, lines, record.source)
    _rich_console.Console().print(table)


@cli.command(name="show")
@_click.argument("skill_id")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.option("--body", is_flag=True, help="Show full skill body")
@_click.pass_context
def show_command(ctx: _click.Context, skill_id: str, json_output: bool, body: bool) -> None:
    """Show details for a specific skill."""
    registry = _get_registry(ctx)

    try:
        record = registry.fetch(skill_id)
    except skills.NotFoundError as e:
        _fail(str(e), json_output=json_output)

    if json_output:
        data = record.to_summary()
        if body:
            data["body"] = record.body
        _click.echo(_json.dumps(data, indent=2))
        return

    _click.echo(f"Skill: {record.id}")
    _click.echo(f"  Name: {record.name}")
    _click.echo(f"  Description: {record.description}")
    _click.echo(f"  Source: {record.source}")
    if record.path:
        _click.echo(f"  Path: {record.path}")
    _click.echo(f"  Body lines: {record.body_line_count}")
    if record.exceeds_soft_limit:
        _click.echo(
            f"  ⚠ Exceeds recommended limit of {constants.SKILL_BODY_SOFT_LIMIT} lines"
        )
    _click.echo(f"  Triggers: {', '.join(sorted(record.terms))}")
    if record.phrases:
        _click.echo("  Phrases:")
        for phrase in sorted(record.phrases):
            _click.echo(f"    - {phrase}")

    if body:
        _click.echo()
        _click.echo("--- Body ---")
        _click.echo(record.body)


@cli.command(name="query")
@_click.argument("text", nargs=-1, required=True)
@_click.option(
    "-n",
    "--limit",
    type=_click.IntRange(min=1),
    default=None,
    help="Maximum number of matches (default from config)",
)
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def query_command(
    ctx: _click.Context,
    text: tuple[str, ...],
    limit: int | None,
    json_output: bool,
) -> None:
    """Rank skills relevant to a description of the current task."""
    registry = _get_registry(ctx)
    query_text = " ".join(text)
    result = registry.query(query_text, limit)

    if json_output:
        _click.echo(_json.dumps({"query": query_text, "matches": result.to_list()}, indent=2))
        return

    if not result:
        _click.echo("No matching skills.")
        return

    table = _rich_table.Table(title=f"Matches for: {query_text}")
    table.add_column("#", justify="right")
    table.add_column("Id", no_wrap=True)
    table.add_column("Score", justify="right")
    table.add_column("Description")
    for rank, skill_match in enumerate(result, start=1):
        table.add_row(str(rank), skill_match.id, str(skill_match.score), skill_match.description)
    _rich_console.Console().print(table)


@cli.command(name="prepare")
@_click.argument("message", nargs=-1, required=True)
@_click.option(
    "--auto/--no-auto",
    default=None,
    help="Match plain messages against skills (default: matching.auto_trigger)",
)
@_click.option("-n", "--limit", type=_click.IntRange(min=1), default=1, help="Auto-trigger limit")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def prepare_command(
    ctx: _click.Context,
    message: tuple[str, ...],
    auto: bool | None,
    limit: int,
    json_output: bool,
) -> None:
    """Resolve /skill commands in a chat message and print what to inject."""
    settings: config.Settings = ctx.obj["settings"]
    result = preprocessor.preprocess_for_skills(
        " ".join(message),
        _get_registry(ctx),
        auto_trigger=settings.matching.auto_trigger if auto is None else auto,
        auto_limit=limit,
    )

    if result.error:
        _fail(result.error, json_output=json_output)

    if json_output:
        _click.echo(
            _json.dumps(
                {
                    "message": result.user_message,
                    "skill_ids": result.skill_ids,
                    "trigger_type": result.trigger_type,
                    "injection": result.skill_injection,
                },
                indent=2,
            )
        )
        return

    if result.skill_injection:
        _click.echo(result.skill_injection)
        _click.echo()
        _click.echo("--- Message ---")
    _click.echo(result.user_message)


@cli.command(name="index")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def index_command(ctx: _click.Context, json_output: bool) -> None:
    """Show the trigger index (term or phrase -> skill ids)."""
    index = _get_registry(ctx).snapshot.index

    if json_output:
        _click.echo(
            _json.dumps(
                {"fingerprint": index.fingerprint(), "index": index.to_dict()},
                indent=2,
            )
        )
        return

    stats = index.stats()
    _click.echo(f"Keys: {stats['keys']} ({stats['terms']} terms, {stats['phrases']} phrases)")
    _click.echo(f"Fingerprint: {index.fingerprint()}")
    _click.echo()
    for key, ids in index.to_dict().items():
        _click.echo(f"{key:<40} {', '.join(ids)}")


def _inspect_skill_dir(path: _pathlib.Path) -> dict[str, _typing.Any]:
    """Load one skill directory the way discovery would and report on it."""
    try:
        definition = skills.load_skill_definition(path)
        record = skills.SkillStore.load([definition]).get(definition.resolve_id())
    except (FileNotFoundError, skills.SkillRegistryError) as e:
        return {"path": str(path), "valid": False, "error": str(e), "warnings": []}

    warnings: list[str] = []
    if record.exceeds_soft_limit:
        warnings.append(
            f"body is {record.body_line_count} lines "
            f"(guideline: {constants.SKILL_BODY_SOFT_LIMIT})"
        )
    if not record.phrases:
        warnings.append("description has no comma- or semicolon-separated phrases")
    return {
        "path": str(path),
        "valid": True,
        "error": None,
        "warnings": warnings,
        "id": record.id,
        "description": record.description,
        "body_lines": record.body_line_count,
        "triggers": len(record.triggers),
    }


@cli.command(name="validate")
@_click.argument("path", type=_click.Path(path_type=_pathlib.Path))
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
def validate_command(path: _pathlib.Path, json_output: bool) -> None:
    """Check that PATH is a loadable skill directory."""
    report = _inspect_skill_dir(path)

    if json_output:
        _click.echo(_json.dumps(report, indent=2))
    elif not report["valid"]:
        _click.echo(f"{path}: invalid")
        _click.echo(f"  {report['error']}")
    else:
        status = "valid with warnings" if report["warnings"] else "valid"
        _click.echo(f"{path}: {status}")
        _click.echo(
            f"  id={report['id']} triggers={report['triggers']} "
            f"lines={report['body_lines']}"
        )
        for warning in report["warnings"]:
            _click.echo(f"  warning: {warning}")

    if not report["valid"]:
        raise SystemExit(1)


@cli.command(name="config")
@_click.option("--json", "json_output", is_flag=True, help="JSON output")
@_click.pass_context
def config_command(ctx: _click.Context, json_output: bool) -> None:
    """Show the effective configuration."""
    settings: config.Settings = ctx.obj["settings"]
    data = settings.to_dict()

    if json_output:
        _click.echo(_json.dumps(data, indent=2))
        return

    _click.echo(f"Config Dir: {data['config_dir']}")
    _click.echo(f"Project Root: {data['project_root']}")
    _click.echo()
    _click.echo("Matching:")
    _click.echo(f"  Term weight: {data['matching']['term_weight']}")
    _click.echo(f"  Phrase weight: {data['matching']['phrase_weight']}")
    _click.echo(f"  Default limit: {data['matching']['default_limit']}")
    _click.echo(f"  Auto trigger: {data['matching']['auto_trigger']}")
    _click.echo(f"  Stop words: {len(data['matching']['stop_words'])}")
    _click.echo("Discovery:")
    _click.echo(f"  Include builtin: {data['discovery']['include_builtin']}")
    for extra in data["discovery"]["extra_paths"]:
        _click.echo(f"  Extra path: {extra}")
    _click.echo("Logging:")
    _click.echo(f"  Enabled: {data['logging']['enabled']}")
    _click.echo(f"  Dir: {data['logging']['dir']}")

    extras = settings.unknown_keys()
    if extras:
        _click.echo()
        _click.echo("Unknown config keys:")
        for key in sorted(extras):
            _click.echo(f"  {key}")


def main() -> None:
    """Main entry point with correct program name."""
    cli(prog_name="skillregistry")


if __name__ == "__main__":
    main()
