#!/usr/bin/env python3

import asyncio
import logging
import os
import sys
from typing import TextIO

import click

from .context import ProjectContext
from .conventional import validate_header
from .mcp import create_server, run_stdio
from .tools import build_registry


def configure_logging(log_file: str = "commitmcp.log") -> None:
    """Configure logging to write to both a file and stderr.

    The log level is determined from the configuration file.
    It can be overridden by setting the COMMITMCP_DEBUG_LEVEL environment variable,
    and COMMITMCP_DEBUG=1 forces DEBUG.

    The log directory is read from the configuration file's logger.path setting.
    By default, logs are written to $HOME/.commitmcp.

    Console output goes to stderr because stdout carries the MCP stdio
    transport.  Logs from the 'mcp' module are filtered out unless in debug
    mode.
    """
    from .config import get_logger_path, get_logger_verbosity

    log_dir = os.path.expanduser(get_logger_path())
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, log_file)

    log_level_str = os.environ.get("COMMITMCP_DEBUG_LEVEL") or get_logger_verbosity()

    log_level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    # Convert string to logging level, default to INFO if invalid
    log_level = log_level_map.get(log_level_str.upper(), logging.INFO)

    debug_mode = False
    if os.environ.get("COMMITMCP_DEBUG"):
        log_level = logging.DEBUG
        debug_mode = True

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    file_handler = logging.FileHandler(log_path)
    file_handler.setLevel(log_level)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(log_level)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    file_handler.setFormatter(formatter)
    console_handler.setFormatter(formatter)

    class ModuleFilter(logging.Filter):
        def filter(self, record: logging.LogRecord) -> bool:
            return debug_mode or not record.name.startswith("mcp")

    module_filter = ModuleFilter()
    file_handler.addFilter(module_filter)
    console_handler.addFilter(module_filter)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.info(f"Logging configured. Log file: {log_path}")
    logging.info(f"Log level set to: {logging.getLevelName(log_level)}")
    if not debug_mode:
        logging.info("Logs from 'mcp' module are being filtered")


@click.group(invoke_without_command=True)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """commitmcp: MCP server that helps an agent write and create git commits."""
    # With no subcommand, serve MCP on stdio
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@cli.command()
def run() -> None:
    """Run the MCP server on stdin/stdout."""
    configure_logging()
    logging.info("Starting MCP commit helper")

    # Tool names are checked here, before any request is accepted
    server = create_server(build_registry(ProjectContext()))

    try:
        asyncio.run(run_stdio(server))
    except KeyboardInterrupt:
        logging.info("Received shutdown signal - exiting")


@cli.command("check-message")
@click.argument("message_file", type=click.File("r"), default="-")
def check_message(message_file: TextIO) -> None:
    """Validate the header of a commit message.

    Reads MESSAGE_FILE (or stdin) and exits with status 1 if the first line
    is not a Conventional Commits header, so it can be used as a git
    commit-msg hook:

        commitmcp check-message "$1"
    """
    message = message_file.read()
    header = validate_header(message)
    if not header.is_valid:
        click.echo(f"Error: {header.error}", err=True)
        sys.exit(1)

    breaking = " (breaking change)" if header.breaking else ""
    scope = f"({header.scope})" if header.scope else ""
    click.echo(f"Valid commit header: {header.type}{scope}{breaking}")
