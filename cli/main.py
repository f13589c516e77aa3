#!/usr/bin/env python3
"""
NFT Registry - Command Line Interface

Replays call scripts against a fresh registry, resolves metadata URIs and
inspects the CLI configuration.
"""

import functools
import logging
import sys
import traceback
from typing import Any, Dict, Optional

import click

from cli.config import ConfigurationError, ConfigurationManager
from cli.output import OUTPUT_FORMATS, OutputFormatter
from registry import __version__
from registry.events import LoggingSubscriber
from registry.exceptions import RegistryError
from registry.replay import load_script, replay as replay_script
from registry.uri import resolve_token_uri


class CLIContext:
    """Global CLI context for sharing state across commands."""

    def __init__(self):
        self.config_file: Optional[str] = None
        self.profile: Optional[str] = None
        self.output_format: Optional[str] = None
        self.verbose: int = 0
        self.config_manager: Optional[ConfigurationManager] = None
        self.logger: logging.Logger = logging.getLogger('nftreg')

    @property
    def config(self) -> Dict[str, Any]:
        return self.config_manager.load() if self.config_manager else {}

    def setup_logging(self):
        """Configure logging based on verbosity level."""
        log_levels = {
            0: logging.WARNING,
            1: logging.INFO,
            2: logging.DEBUG
        }

        level = log_levels.get(min(self.verbose, 2), logging.DEBUG)

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)

        # Registry modules log under their package names
        for name in ('nftreg', 'registry'):
            logger = logging.getLogger(name)
            logger.setLevel(level)
            for existing in list(logger.handlers):
                logger.removeHandler(existing)
            logger.addHandler(handler)

    def load_config(self):
        """Load configuration from defaults, profile, files and environment."""
        self.config_manager = ConfigurationManager(self.config_file, self.profile)
        self.config_manager.load()
        self.logger.debug(f"Configuration sources: {', '.join(self.config_manager.get_sources())}")

    def output(self, data: Any):
        """Output data in the selected format."""
        format_type = self.output_format or self.config.get('cli', {}).get('output_format', 'table')
        click.echo(OutputFormatter(format_type).format(data))


pass_context = click.make_pass_decorator(CLIContext, ensure=True)


def handle_cli_error(func):
    """Decorator turning registry and configuration errors into exit code 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (RegistryError, ConfigurationError, OSError) as e:
            ctx = click.get_current_context().find_object(CLIContext)
            click.echo(f"Error: {e}", err=True)
            if isinstance(e, RegistryError) and e.details:
                for key, value in e.details.items():
                    click.echo(f"  {key}: {value}", err=True)
            if ctx and ctx.verbose >= 2:
                click.echo(traceback.format_exc(), err=True)
            else:
                click.echo("Use -vv for detailed error information.", err=True)
            sys.exit(1)

    return wrapper


@click.group(context_settings={'help_option_names': ['-h', '--help']})
@click.option('--config-file', '-c',
              help='Path to configuration file')
@click.option('--profile',
              help='Configuration profile (production, development)')
@click.option('--output-format', '-o',
              type=click.Choice(OUTPUT_FORMATS),
              default=None,
              help='Output format')
@click.option('--verbose', '-v',
              count=True,
              help='Increase verbosity (-v for INFO, -vv for DEBUG)')
@click.version_option(__version__, prog_name='nftreg')
@pass_context
@handle_cli_error
def cli(ctx: CLIContext, config_file: Optional[str], profile: Optional[str],
        output_format: Optional[str], verbose: int):
    """
    NFT Registry command line interface.

    Examples:
        nftreg replay calls.yml
        nftreg -o json replay calls.yml --stop-on-error
        nftreg uri https://example.com/metadata 7
    """
    ctx.config_file = config_file
    ctx.profile = profile
    ctx.output_format = output_format

    ctx.load_config()
    ctx.verbose = verbose or ctx.config.get('cli', {}).get('verbose', 0)
    ctx.setup_logging()

    ctx.logger.debug("CLI initialized with context")


@cli.command()
@click.argument('script', type=click.Path(exists=True, dir_okay=False))
@click.option('--stop-on-error/--continue-on-error', default=None,
              help='Stop at the first failing call')
@click.option('--summary-only', is_flag=True,
              help='Only print the replay summary')
@pass_context
@handle_cli_error
def replay(ctx: CLIContext, script: str, stop_on_error: Optional[bool], summary_only: bool):
    """
    Replay a YAML or JSON call script against a fresh registry.

    Collection parameters missing from the script come from the
    `collection` configuration section.
    """
    replay_config = ctx.config.get('replay', {})
    if stop_on_error is None:
        stop_on_error = bool(replay_config.get('stop_on_error', False))

    subscribers = [LoggingSubscriber()] if replay_config.get('log_events') else []

    report = replay_script(
        load_script(script),
        defaults=ctx.config.get('collection', {}),
        stop_on_error=stop_on_error,
        subscribers=subscribers
    )
    ctx.logger.info(f"Replayed {len(report.outcomes)} calls from {script}")

    if summary_only:
        ctx.output(report.summary())
        return

    snapshot = report.snapshot
    ctx.output({
        'summary': report.summary(),
        'outcomes': report.outcomes,
        'events': report.events,
        'tokens': snapshot.tokens,
        'balances': snapshot.balances,
    })


@cli.command()
@click.argument('base_uri')
@click.argument('token_id', type=click.IntRange(min=1))
def uri(base_uri: str, token_id: int):
    """Print the metadata locator of TOKEN_ID under BASE_URI."""
    click.echo(resolve_token_uri(base_uri, token_id))


@cli.group()
@pass_context
def config(ctx: CLIContext):
    """Configuration management commands."""
    ctx.logger.debug("Config command group invoked")


@config.command('show')
@click.option('--sources', is_flag=True, help='Show configuration sources instead')
@pass_context
def config_show(ctx: CLIContext, sources: bool):
    """Show the merged configuration."""
    if sources:
        ctx.output(ctx.config_manager.get_sources())
    else:
        ctx.output(ctx.config)


@config.command('validate')
@pass_context
def config_validate(ctx: CLIContext):
    """Validate the merged configuration."""
    errors = ctx.config_manager.validate()
    if errors:
        for error in errors:
            click.echo(f"Error: {error}", err=True)
        sys.exit(1)
    click.echo("Configuration is valid")


def main():
    """Console script entry point."""
    cli(prog_name='nftreg')


if __name__ == '__main__':
    main()
