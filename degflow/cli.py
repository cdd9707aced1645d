"""
Command-line interface for DegFlow
"""

import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__, check_dependencies, get_info
from .config import RunConfig, get_default_config, load_config, save_config
from .core import DegFlowAnalysis
from .differential import classify as classify_table
from .differential import summarize_classification
from .genomics import compare_sets
from .io import load_de_table, read_gene_list
from .utils import setup_logging


class CLIContext:
    def __init__(self):
        self.config_file: Optional[Path] = None
        self.config: Optional[RunConfig] = None
        self.verbose: bool = False
        self.quiet: bool = False

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.verbose else "WARNING" if self.quiet else "INFO"

    def get_config(self) -> RunConfig:
        return self.config if self.config is not None else get_default_config()


def _fail(message: str, verbose: bool = False) -> None:
    click.echo(message, err=True)
    if verbose:
        import traceback

        traceback.print_exc()
    sys.exit(1)


@click.group()
@click.version_option(__version__)
@click.option(
    "--config", "-c", type=click.Path(exists=True), help="Configuration file path"
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--quiet", "-q", is_flag=True, help="Enable quiet mode (minimal output)")
@click.pass_context
def main(ctx, config, verbose, quiet):
    """
    DegFlow: differential expression classification and plotting pipeline

    Labels genes from a DE results table and renders volcano, MA, heatmap,
    GSEA dot plot and Venn figures from consistent joined views.
    """
    cli_ctx = CLIContext()
    cli_ctx.verbose = verbose
    cli_ctx.quiet = quiet

    setup_logging(level=cli_ctx.log_level)

    if config:
        cli_ctx.config_file = Path(config)
        try:
            cli_ctx.config = load_config(cli_ctx.config_file)
        except Exception as e:
            _fail(f"Could not load configuration: {e}")

    ctx.obj = cli_ctx


@main.command()
def info():
    """Show DegFlow package information"""

    info_data = get_info()

    click.echo("=" * 50)
    click.echo(f"DegFlow v{info_data['version']}")
    click.echo("=" * 50)
    click.echo(f"Description: {info_data['description']}")
    click.echo(f"Python version: {info_data['python_version']}")
    click.echo()

    click.echo("Available modules:")
    for module in info_data["modules"]:
        click.echo(f"  - {module}")
    click.echo()

    click.echo("Dependency status:")
    for dep, available in check_dependencies().items():
        status = "✓" if available else "✗"
        click.echo(f"  {status} {dep}")


@main.command()
@click.argument("output_file", type=click.Path())
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init_config(output_file, force):
    """Write a default configuration file (YAML, or JSON by suffix)"""

    output_path = Path(output_file)

    if output_path.exists() and not force:
        if not click.confirm(f"File {output_path} already exists. Overwrite?"):
            click.echo("Configuration initialization cancelled.")
            return

    save_config(get_default_config(), output_path)
    click.echo(f"Configuration file created: {output_path}")
    click.echo("Edit this file to point at your tables and set column renames.")


@main.command()
@click.argument("config_file", type=click.Path(exists=True))
def validate_config(config_file):
    """Validate a DegFlow configuration file"""

    from .config import validate_config as validate_config_func

    try:
        config = load_config(config_file)
    except Exception as e:
        _fail(f"Configuration validation failed: {e}")

    click.echo(f"Configuration loaded successfully: {config_file}")

    issues = validate_config_func(config)
    if not issues:
        click.echo("✓ Configuration is valid")
        return

    click.echo("Configuration issues found:")
    for issue in issues:
        click.echo(f"  ✗ {issue}")
    sys.exit(1)


@main.command()
@click.option("--output", "-o", type=click.Path(), help="Output directory")
@click.option(
    "--step",
    "steps",
    multiple=True,
    type=click.Choice(
        ["load", "classify", "views", "enrichment", "overlap", "plots", "export"]
    ),
    help="Run only these steps (repeatable)",
)
@click.pass_context
def run(ctx, output, steps):
    """Run the complete DegFlow pipeline"""

    cli_ctx = ctx.obj

    if cli_ctx.config is None:
        _fail(
            "Error: No configuration file provided. Use --config option or 'degflow init-config'"
        )

    if output:
        cli_ctx.config.output_dir = str(output)

    try:
        analysis = DegFlowAnalysis(
            config=cli_ctx.config, log_level=cli_ctx.log_level
        )
        click.echo("Starting DegFlow pipeline...")
        results = analysis.run_full_pipeline(list(steps) or None)
    except Exception as e:
        _fail(f"Pipeline aborted: {e}", cli_ctx.verbose)

    success_count = 0
    for step, result in results.items():
        if result.get("success", False):
            success_count += 1
            status = "✓"
        else:
            status = "✗"
        click.echo(f"  {status} {step}")

    total_time = analysis.get_execution_times().get("total", 0)
    click.echo(f"Total execution time: {total_time:.2f} seconds")
    click.echo(f"Successfully completed {success_count}/{len(results)} pipeline steps")

    if success_count < len(results):
        sys.exit(1)


@main.command()
@click.argument("input_file", type=click.Path(exists=True))
@click.argument("output_file", type=click.Path())
@click.option("--fc-threshold", type=float, help="Minimum |log2 fold change|")
@click.option("--p-threshold", type=float, help="Maximum adjusted p-value")
@click.pass_context
def classify(ctx, input_file, output_file, fc_threshold, p_threshold):
    """Label genes in a DE table and write it as TSV"""

    cli_ctx = ctx.obj
    config = cli_ctx.get_config()
    fc_threshold = fc_threshold if fc_threshold is not None else config.thresholds["fc_threshold"]
    p_threshold = p_threshold if p_threshold is not None else config.thresholds["p_threshold"]

    output_path = Path(output_file)
    try:
        table = load_de_table(input_file, config)
        labeled = classify_table(table, fc_threshold=fc_threshold, p_threshold=p_threshold)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        labeled.to_csv(output_path, sep="\t", index=False)
    except Exception as e:
        _fail(f"Classification failed: {e}", cli_ctx.verbose)

    summary = summarize_classification(labeled, fc_threshold=fc_threshold, p_threshold=p_threshold)
    click.echo(
        f"{summary.n_tested} genes: {summary.n_up} up, {summary.n_down} down, "
        f"{summary.n_not_significant} not significant"
    )
    click.echo(f"Labeled table written: {output_path}")


@main.command()
@click.argument("list_a", type=click.Path(exists=True))
@click.argument("list_b", type=click.Path(exists=True))
@click.option("--plot", type=click.Path(), help="Save a proportional Venn diagram here")
@click.option("--labels", nargs=2, type=str, help="Names of the two lists")
@click.pass_context
def overlap(ctx, list_a, list_b, plot, labels):
    """Compare two gene lists (one identifier per line)"""

    cli_ctx = ctx.obj
    config = cli_ctx.get_config()
    delimiter = config.columns.get("id_delimiter", "|")
    labels = tuple(labels) if labels else (Path(list_a).stem, Path(list_b).stem)

    try:
        result = compare_sets(
            read_gene_list(list_a, delimiter), read_gene_list(list_b, delimiter)
        )
    except Exception as e:
        _fail(f"Overlap failed: {e}", cli_ctx.verbose)

    click.echo(f"{labels[0]}: {result.count_a} genes")
    click.echo(f"{labels[1]}: {result.count_b} genes")
    click.echo(f"Shared: {result.count_intersection}")
    click.echo(f"Only {labels[0]}: {len(result.unique_to_a)}")
    click.echo(f"Only {labels[1]}: {len(result.unique_to_b)}")

    if plot:
        from .visualization import create_venn_diagram

        for path in create_venn_diagram(result, plot, config, labels=labels):
            click.echo(f"Venn diagram saved: {path}")


if __name__ == "__main__":
    main()
