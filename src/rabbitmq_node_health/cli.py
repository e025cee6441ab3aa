"""Command-line interface for the RabbitMQ node health check."""

import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

import click
from click.core import ParameterSource
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from rabbitmq_node_health import __version__
from rabbitmq_node_health.checker import NodeHealthCheck
from rabbitmq_node_health.config import (
    Config,
    ConfigError,
    create_example_config,
    load_ini_credentials,
)
from rabbitmq_node_health.models import HealthStatus, Verdict

CHECK_NAME = "RabbitMQNodeHealth"

# Monitoring plugin exit code convention
EXIT_CODES = {
    HealthStatus.OK: 0,
    HealthStatus.WARNING: 1,
    HealthStatus.CRITICAL: 2,
    HealthStatus.UNKNOWN: 3,
}

# CLI options named after their ConnectionConfig field
CONNECTION_OPTIONS = (
    "host",
    "port",
    "username",
    "password",
    "ssl",
    "verify_ssl_off",
    "timeout",
    "node_name",
)

# CLI option name -> Thresholds field
THRESHOLD_OPTIONS = {
    "memwarn": "memory_warning",
    "memcrit": "memory_critical",
    "socketwarn": "socket_warning",
    "socketcrit": "socket_critical",
    "fdwarn": "fd_warning",
    "fdcrit": "fd_critical",
    "watch_alarms": "watch_alarms",
    "check_fd": "check_file_descriptors",
}

console = Console()


def setup_logging(level: str) -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def status_color(status: HealthStatus) -> str:
    """Get Rich color for health status."""
    colors = {
        HealthStatus.OK: "green",
        HealthStatus.WARNING: "yellow",
        HealthStatus.CRITICAL: "red",
        HealthStatus.UNKNOWN: "dim",
    }
    return colors.get(status, "white")


def format_check_line(verdict: Verdict) -> str:
    """Format the single output line monitoring frameworks expect."""
    return f"{CHECK_NAME} {verdict.status.value.upper()}: {verdict.message}"


def create_verdict_panel(verdict: Verdict, config: Config) -> Panel:
    """Create a Rich panel describing a verdict."""
    style = status_color(verdict.status)
    
    body = Table.grid(padding=(0, 1))
    body.add_column(style="bold")
    body.add_column()
    body.add_row("Node:", config.connection.node)
    body.add_row("Status:", f"[{style}]{verdict.status.value.upper()}[/]")
    body.add_row("Message:", Text(verdict.message))
    for finding in verdict.findings:
        body.add_row("", Text(f"• {finding.text.strip()}", style=status_color(finding.status)))
    
    return Panel(body, title=f"Health: {config.connection.base_url}", border_style=style)


def build_config(ctx: click.Context, config_path: Optional[str], params: dict[str, Any]) -> Config:
    """Merge the optional YAML config file with command-line options.
    
    Without a config file every option applies (defaults included). With
    one, only options given explicitly on the command line override it.
    """
    cfg = Config.from_yaml(config_path) if config_path else Config()
    
    def given(name: str) -> bool:
        if not config_path:
            return True
        return ctx.get_parameter_source(name) in (
            ParameterSource.COMMANDLINE,
            ParameterSource.ENVIRONMENT,
        )
    
    connection = {
        option: params[option]
        for option in CONNECTION_OPTIONS
        if given(option) and params[option] is not None
    }
    if params["ini"]:
        connection["username"], connection["password"] = load_ini_credentials(params["ini"])
    
    thresholds = {
        field: params[option]
        for option, field in THRESHOLD_OPTIONS.items()
        if given(option)
    }
    
    return dataclasses.replace(
        cfg,
        connection=dataclasses.replace(cfg.connection, **connection),
        thresholds=dataclasses.replace(cfg.thresholds, **thresholds),
    )


def emit(verdict: Verdict, config: Config | None, output_json: bool, pretty: bool) -> None:
    """Print a verdict and exit with its status code."""
    if output_json:
        click.echo(json.dumps(verdict.to_dict(), indent=2))
    elif pretty and config is not None:
        console.print(create_verdict_panel(verdict, config))
    else:
        click.echo(format_check_line(verdict))
    
    sys.exit(EXIT_CODES[verdict.status])


class CheckCommand(click.Command):
    """Command that reports bad arguments as an UNKNOWN result instead of a usage error."""
    
    def make_context(self, info_name, args, parent=None, **extra):
        output_json = "--json" in args
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as e:
            emit(Verdict.from_error(HealthStatus.UNKNOWN, e.format_message()), None, output_json, False)


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """RabbitMQ node health check for Sensu/Nagios style monitoring."""
    pass


@main.command(cls=CheckCommand)
@click.option("--config", "config_path", type=click.Path(), help="Path to YAML configuration file")
@click.option("-w", "--host", default="localhost", help="RabbitMQ host")
@click.option("-u", "--username", default="guest", help="RabbitMQ username")
@click.option("-p", "--password", default="guest", help="RabbitMQ password")
@click.option("-P", "--port", default=15672, type=int, help="RabbitMQ API port")
@click.option("--ssl", is_flag=True, help="Enable SSL for connection to the API")
@click.option(
    "--verify_ssl_off",
    is_flag=True,
    help="Do not check validity of SSL cert. Use for self-signed certs, etc (insecure)",
)
@click.option("--timeout", default=10.0, type=float, help="HTTP timeout in seconds")
@click.option("--node-name", default=None, help="Node name to query (default: rabbit@HOST)")
@click.option("-m", "--mwarn", "memwarn", default=80.0, type=float, help="Warning % of mem usage vs high watermark")
@click.option("-c", "--mcrit", "memcrit", default=90.0, type=float, help="Critical % of mem usage vs high watermark")
@click.option("-f", "--fwarn", "fdwarn", default=80.0, type=float, help="Warning % of file descriptor usage")
@click.option("-F", "--fcrit", "fdcrit", default=90.0, type=float, help="Critical % of file descriptor usage")
@click.option("-s", "--swarn", "socketwarn", default=80.0, type=float, help="Warning % of socket usage")
@click.option("-S", "--scrit", "socketcrit", default=90.0, type=float, help="Critical % of socket usage")
@click.option(
    "-a", "--alarms", "watch_alarms",
    default=True,
    type=click.BOOL,
    help="Sound critical if one or more alarms are triggered",
)
@click.option("--check-fd", "check_fd", is_flag=True, help="Evaluate file descriptor thresholds")
@click.option("-i", "--ini", type=click.Path(), help="Configuration ini file with an [auth] section")
@click.option("--json", "output_json", is_flag=True, help="Output in JSON format")
@click.option("--pretty", is_flag=True, help="Render the verdict as a panel")
@click.option(
    "--log-level",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Logging level",
)
@click.pass_context
def check(
    ctx: click.Context,
    config_path: Optional[str],
    output_json: bool,
    pretty: bool,
    log_level: str,
    **params: Any,
) -> None:
    """Check health of a single RabbitMQ node."""
    setup_logging(log_level)
    
    try:
        cfg = build_config(ctx, config_path, params)
        if config_path and ctx.get_parameter_source("log_level") != ParameterSource.COMMANDLINE:
            logging.getLogger().setLevel(cfg.log_level)
    except (ConfigError, ValueError) as e:
        emit(Verdict.from_error(HealthStatus.UNKNOWN, e), None, output_json, pretty)
    
    verdict = NodeHealthCheck(cfg).run()
    emit(verdict, cfg, output_json, pretty)


@main.command()
@click.option(
    "-o", "--output",
    default="rabbitmq-node-health.yaml",
    help="Output file path",
)
@click.option(
    "--force", "-f",
    is_flag=True,
    help="Overwrite existing file",
)
def init(output: str, force: bool) -> None:
    """Create an example configuration file."""
    path = Path(output)
    
    if path.exists() and not force:
        console.print(f"[red]File already exists: {path}[/]")
        console.print("Use --force to overwrite")
        sys.exit(1)
    
    example = create_example_config()
    example.to_yaml(path)
    
    console.print(f"[green]Created example configuration: {path}[/]")
    console.print("Edit this file to set your node and thresholds.")


if __name__ == "__main__":
    main()
