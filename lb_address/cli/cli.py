#!/usr/bin/env python3
"""
Main CLI entry point using Typer.
"""

import os
import sys
from typing import Optional

import typer
from oslo_config import cfg
from oslo_log import log as logging

from lb_address.cli.commands import address
from lb_address.loadbalancers.configuration import register_opts

DEFAULT_CONFIG_PATH = "/etc/lb-address/lb-address.conf"

app = typer.Typer(
    name="lb-address",
    help="Load balancer address reservation tool",
    add_completion=False,
)

# Add command groups
app.add_typer(address.app, name="address", help="Address management commands")


def load_conf(config_file: Optional[str], debug: bool = False) -> cfg.ConfigOpts:
    """
    Build the configuration and set up logging.

    A missing default config file is not an error; defaults are used.
    """
    conf = cfg.ConfigOpts()
    register_opts(conf)
    logging.register_options(conf)

    config_files = []
    if config_file:
        if not os.path.exists(config_file):
            raise typer.BadParameter(f"Config file {config_file} does not exist")
        config_files.append(config_file)
    elif os.path.exists(DEFAULT_CONFIG_PATH):
        config_files.append(DEFAULT_CONFIG_PATH)

    conf(args=[], project="lb-address", default_config_files=config_files)
    if debug:
        conf.set_override("debug", True)
    logging.setup(conf, "lb-address")
    return conf


@app.callback()
def configure(
    ctx: typer.Context,
    config_file: Optional[str] = typer.Option(
        None, "--config-file", envvar="LB_ADDRESS_CONFIG", help="Path to configuration file"
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """
    Load configuration shared by all commands.
    """
    ctx.obj = load_conf(config_file, debug)


def main() -> int:
    """Main entry point."""
    try:
        app()
        return 0
    except KeyboardInterrupt:
        typer.echo("\nOperation cancelled by user", err=True)
        return 130
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
