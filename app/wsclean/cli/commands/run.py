"""Workspace cleanup command.

Cleans a build workspace (and optionally an external workspace and
the workspaces of fan-out child builds) and prints build-log lines.

Exit codes: 0 when clean or when leftovers are only a warning,
1 when leftovers fail the build, 2 on a configuration error.
"""

from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError

from wsclean.cli.display import create_outcomes_table
from wsclean.core.config import BuildPhase, BuildResult, CleanupConfig, load_config
from wsclean.engine.coordinator import resolve_roots
from wsclean.engine.errors import ConfigurationError
from wsclean.models.root import LOCAL_NODE, Root
from wsclean.models.rule import RuleType
from wsclean.utils.formatting import (
    console,
    print_error,
    print_info,
    print_log_line,
    print_success,
    print_warning,
)

EXIT_RESIDUE = 1
EXIT_CONFIG_ERROR = 2

app = typer.Typer(help="Clean build workspaces.")


@app.callback(invoke_without_command=True)
def run(
    ctx: typer.Context,
    workspace: Annotated[
        Path | None,
        typer.Option("--workspace", "-w", help="Primary workspace of the build."),
    ] = None,
    node: Annotated[
        str,
        typer.Option("--node", "-n", help="Node/agent the workspaces live on."),
    ] = LOCAL_NODE,
    alternate: Annotated[
        Path | None,
        typer.Option("--alternate", "-a", help="External workspace to clean as well."),
    ] = None,
    children: Annotated[
        list[Path] | None,
        typer.Option("--child", "-c", help="Workspace of a child build (repeatable)."),
    ] = None,
    parent: Annotated[
        Path | None,
        typer.Option("--parent", "-p", help="Workspace of the parent build."),
    ] = None,
    include: Annotated[
        list[str] | None,
        typer.Option("--include", "-i", help="Pattern to delete (repeatable)."),
    ] = None,
    exclude: Annotated[
        list[str] | None,
        typer.Option("--exclude", "-x", help="Pattern to keep (repeatable)."),
    ] = None,
    wipeout: Annotated[
        bool | None,
        typer.Option("--wipeout/--no-wipeout", help="Remove the whole workspace."),
    ] = None,
    delete_dirs: Annotated[
        bool | None,
        typer.Option("--delete-dirs/--no-delete-dirs", help="Apply patterns to directories."),
    ] = None,
    command: Annotated[
        str | None,
        typer.Option("--command", help="External delete command, '%s' is the path."),
    ] = None,
    fail_on_residue: Annotated[
        bool | None,
        typer.Option("--fail-on-residue/--warn-on-residue", help="Fail when entries remain."),
    ] = None,
    deferred: Annotated[
        bool | None,
        typer.Option("--deferred/--no-deferred", help="Rename workspace aside before wipeout."),
    ] = None,
    phase: Annotated[
        BuildPhase,
        typer.Option("--phase", help="Whether cleanup runs before or after the build."),
    ] = BuildPhase.POST,
    build_result: Annotated[
        BuildResult | None,
        typer.Option("--build-result", "-r", help="Result of the finished build."),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", help="Cleanup configuration file."),
    ] = None,
    wait: Annotated[
        bool,
        typer.Option("--wait/--no-wait", help="Wait for background deletion to finish."),
    ] = True,
) -> None:
    """Clean build workspaces by patterns or by whole wipeout."""
    if ctx.invoked_subcommand is not None:
        return
    if workspace is None:
        print_error("Missing option --workspace.")
        raise typer.Exit(code=EXIT_CONFIG_ERROR)

    quiet = bool((ctx.find_root().obj or {}).get("quiet", False))

    try:
        config = _effective_config(
            load_config(config_path, required=config_path is not None),
            include=include or [],
            exclude=exclude or [],
            wipeout=wipeout,
            delete_dirs=delete_dirs,
            command=command,
            fail_on_residue=fail_on_residue,
            deferred=deferred,
        )
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from e

    if config.is_skipped():
        print_info(f"Cleanup disabled by ${config.skip_variable}.")
        return
    if not config.should_run(phase, build_result):
        result_name = build_result.value if build_result else "unknown"
        print_info(f"Skipping cleanup for build result '{result_name}'.")
        return

    def resolver() -> list[Root]:
        return resolve_roots(
            Root(workspace, node=node, label="primary"),
            alternate=Root(alternate, node=node, label="alternate") if alternate else None,
            children=[Root(c, node=node, label="child") for c in children or []],
            parent=Root(parent, node=node, label="parent") if parent else None,
        )

    try:
        coordinator = config.build_coordinator()
        result = coordinator.run(resolver)
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from e

    for line in result.log_lines:
        print_log_line(line)
    if not quiet:
        console.print(create_outcomes_table(result))

    if wait:
        coordinator.wait()

    if result.success:
        if not quiet:
            print_success("Workspace cleanup finished.")
        return
    if result.should_fail_build:
        print_error("Workspace cleanup left files behind.")
        raise typer.Exit(code=EXIT_RESIDUE)
    print_warning("Workspace cleanup left files behind.")


def _effective_config(
    config: CleanupConfig,
    *,
    include: list[str],
    exclude: list[str],
    wipeout: bool | None,
    delete_dirs: bool | None,
    command: str | None,
    fail_on_residue: bool | None,
    deferred: bool | None,
) -> CleanupConfig:
    """Apply command-line overrides on top of the loaded configuration.

    Command-line includes are appended after configured patterns and
    command-line excludes after those, so exclusions given on the
    command line always win.
    """
    data: dict[str, Any] = config.model_dump(mode="json")
    data["patterns"] = [
        *data["patterns"],
        *({"pattern": p, "type": RuleType.INCLUDE.value} for p in include),
        *({"pattern": p, "type": RuleType.EXCLUDE.value} for p in exclude),
    ]
    overrides = {
        "wipeout": wipeout,
        "delete_dirs": delete_dirs,
        "external_command": command,
        "fail_on_residue": fail_on_residue,
        "deferred_wipeout": deferred,
    }
    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return CleanupConfig.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid cleanup options: {e}"
        raise ConfigurationError(msg) from e
