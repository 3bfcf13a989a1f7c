"""Documentation generator command line.

Reads a Rhai function metadata dump (`Engine::gen_fn_metadata_to_json`) and
generates:
    {out}/{page}.md   - one mdbook page per module
    {out}/{page}.mdx  - one Docusaurus page per module
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path

import typer

from .builder import export
from .errors import AutodocsError
from .models import ExportConfig, ExportedDocumentation
from .renderers import FLAVORS, page_id, render
from .sources import JsonMetadataSource
from .validators import compute_coverage, validate_docs

app = typer.Typer(
    help="Generate Markdown documentation from Rhai engine metadata",
    no_args_is_help=True,
)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _export(
    metadata: Path, include_std: bool, strict_indices: bool
) -> ExportedDocumentation:
    config = ExportConfig(
        include_standard_library=include_std, strict_indices=strict_indices
    )
    try:
        source = JsonMetadataSource.from_path(metadata, include_std)
        return export(source, config)
    except AutodocsError as e:
        typer.echo(f"✗ {e}", err=True)
        raise typer.Exit(1) from e


@app.command("generate")
def generate(
    metadata: Path = typer.Argument(..., help="Metadata JSON dumped from the engine"),
    out: Path = typer.Option(Path("docs"), "--out", "-o", help="Output directory"),
    flavor: str = typer.Option(
        "mdbook", "--flavor", "-f", help=f"One of: {', '.join(sorted(FLAVORS))}"
    ),
    slug_prefix: str = typer.Option(
        "/",
        "--slug-prefix",
        envvar="RHAI_AUTODOCS_SLUG_PREFIX",
        help="URL prefix of the generated pages (docusaurus)",
    ),
    include_std: bool = typer.Option(
        False,
        "--include-std",
        envvar="RHAI_AUTODOCS_INCLUDE_STD",
        help="The dump contains the standard packages and they should be documented",
    ),
    strict_indices: bool = typer.Option(
        False, "--strict-indices", help="Fail when two functions share an index"
    ),
    strict_docs: bool = typer.Option(
        False, "--strict-docs", help="Fail when a function has no index directive"
    ),
    clean: bool = typer.Option(
        False, "--clean", help="Remove the output directory first"
    ),
    log_level: str = typer.Option(
        "warning", "--log-level", envvar="RHAI_AUTODOCS_LOG_LEVEL"
    ),
) -> None:
    """Generate one page per module."""
    _setup_logging(log_level)

    typer.echo("Extracting documentation...")
    exported = _export(metadata, include_std, strict_indices)
    for path, module in exported.modules.items():
        total = len(module.functions) + len(module.undocumented)
        typer.echo(f"  ✓ {path}: {len(module.functions)}/{total} functions")

    validation = validate_docs(exported, strict=strict_docs)
    for warning in validation.warnings:
        typer.echo(f"  ⚠ {warning}", err=True)
    if validation.errors:
        typer.echo("\nValidation errors:")
        for err in validation.errors:
            typer.echo(f"  ✗ {err}")
        raise typer.Exit(1)

    coverage = compute_coverage(exported)
    typer.echo("\nCoverage:")
    for path, ratio in coverage.items():
        typer.echo(f"  {path}: {ratio:.0%}")

    flavor_config = {"slug_prefix": slug_prefix} if flavor == "docusaurus" else {}
    try:
        pages = render(flavor, flavor_config, exported)
    except AutodocsError as e:
        typer.echo(f"✗ {e}", err=True)
        raise typer.Exit(1) from e

    if clean and out.exists():
        shutil.rmtree(out)
    out.mkdir(parents=True, exist_ok=True)

    typer.echo("\nGenerated:")
    extension = FLAVORS[flavor].extension
    for path, text in pages.items():
        target = out / f"{page_id(path)}{extension}"
        target.write_text(text)
        typer.echo(f"  {target}")

    typer.echo("\nDone!")


@app.command("dump")
def dump(
    metadata: Path = typer.Argument(..., help="Metadata JSON dumped from the engine"),
    out: Path | None = typer.Option(
        None, "--out", "-o", help="Write the model here instead of stdout"
    ),
    include_std: bool = typer.Option(
        False, "--include-std", envvar="RHAI_AUTODOCS_INCLUDE_STD"
    ),
    strict_indices: bool = typer.Option(False, "--strict-indices"),
) -> None:
    """Write the documentation model as JSON."""
    exported = _export(metadata, include_std, strict_indices)
    text = json.dumps(exported.to_dict(), indent=2)
    if out is None:
        typer.echo(text)
    else:
        out.write_text(text + "\n")
        typer.echo(f"  {out}")


def main():
    app()


if __name__ == "__main__":
    main()
