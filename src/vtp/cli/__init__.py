"""CLI module for Video Transcode Planner."""

import logging
from pathlib import Path

import click

from vtp.cli.exit_codes import ExitCode
from vtp.config import get_config, set_cached_config
from vtp.config.models import VTPConfig
from vtp.exceptions import ValidationError
from vtp.logging import configure_logging

logger = logging.getLogger(__name__)


def get_cli_config(ctx: click.Context) -> VTPConfig:
    """Return the configuration loaded by the ``vtp`` group."""
    return ctx.find_root().obj["config"]


@click.group()
@click.version_option(package_name="video-transcode-planner")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: ~/.vtp/config.toml or VTP_CONFIG_PATH).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """Video Transcode Planner - Plan and run multi-output ffmpeg transcodes."""
    ctx.ensure_object(dict)

    # Tests may inject a ready config
    config = ctx.obj.get("config")
    if config is None:
        try:
            config = get_config(config_path=config_path, log_level=log_level)
        except ValidationError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(ExitCode.CONFIG_ERROR)
        ctx.obj["config"] = config
    set_cached_config(config)

    logging_config = configure_logging(
        config.logging, level=log_level, file=log_file, json_format=log_json
    )
    logger.debug(
        "vtp starting: log_level=%s, log_file=%s",
        logging_config.level,
        logging_config.file or "stderr",
    )


def _register_commands() -> None:
    from vtp.cli.inspect import inspect_command
    from vtp.cli.plan import plan_command
    from vtp.cli.transcode import transcode_command

    main.add_command(inspect_command)
    main.add_command(plan_command)
    main.add_command(transcode_command)


_register_commands()
