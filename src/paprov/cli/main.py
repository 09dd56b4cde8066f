"""
Main CLI entry point for paprov.

Defines the root command group and registers all subcommands.
"""

import logging

import click

from paprov import __version__
from paprov.cli.utils import AliasedGroup


CONTEXT_SETTINGS = dict(
    help_option_names=["-h", "--help"],
    max_content_width=120,
)


@click.group(cls=AliasedGroup, context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, "-V", "--version", prog_name="paprov")
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output with detailed logging.",
)
@click.option(
    "--quiet", "-q",
    is_flag=True,
    help="Suppress all output except errors.",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool) -> None:
    """
    paprov: private-allele screening of candidate source populations.

    Counts, for an individual of unknown provenance, the SNP loci at which it
    carries an allele absent from each reference population, and keeps only
    the populations that remain plausible sources.

    \b
    Command groups:
      popgen  - Private-allele report
      util    - Dataset utilities (keep individuals, subsample loci, convert)

    \b
    Quick start:
      paprov popgen report-pa -i genotypes.tsv --id UC_00146 -o results/uc146
      paprov popgen report-pa -i calls.vcf.gz --popmap pops.txt --id S12 \\
          --nmin 5 --threshold 1 -o results/s12

    For detailed help on any command, use: paprov <command> --help
    """
    ctx.ensure_object(dict)

    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    if verbose and not quiet:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    elif quiet:
        logging.basicConfig(level=logging.ERROR)


from paprov.cli.popgen import popgen
from paprov.cli.util import util

cli.add_command(popgen)
cli.add_command(util)


@cli.command()
@click.pass_context
def info(ctx: click.Context) -> None:
    """
    Display version and environment information.

    Shows paprov version, Python version, and installed dependencies.
    """
    import sys
    import platform
    from importlib.metadata import version, PackageNotFoundError

    click.echo(f"paprov version: {__version__}")
    click.echo(f"Python version: {sys.version}")
    click.echo(f"Platform: {platform.platform()}")

    click.echo("\nInstalled dependencies:")

    for dist in ("numpy", "pandas", "click", "PyYAML", "cyvcf2", "matplotlib", "seaborn"):
        try:
            click.echo(f"  {dist}: {version(dist)}")
        except PackageNotFoundError:
            click.echo(f"  {dist}: not installed")


if __name__ == "__main__":
    cli()
