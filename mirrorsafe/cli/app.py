"""Command-line interface for MirrorSafe."""

from pathlib import Path
from typing import Optional

import numpy as np
import typer
from rich.console import Console
from rich.table import Table

from mirrorsafe import __version__
from mirrorsafe.core import Config, MirrorSafeError
from mirrorsafe.core.engine import MirrorEngine
from mirrorsafe.processing import Axis, build_topology, classify
from mirrorsafe.utils import setup_logging

app = typer.Typer(
    name="mirrorsafe",
    help="Mirror STL meshes while keeping small text decals unmirrored",
    add_completion=False,
)
console = Console()


def _load_config(config: Optional[Path]) -> Config:
    cfg = Config.from_toml(config) if config else Config()
    setup_logging(cfg.logging)
    return cfg


def _default_output(stl_file: Path, axis: Axis) -> Path:
    return stl_file.with_name(f"{stl_file.stem}_mirrored_{axis.value.lower()}.stl")


@app.command()
def mirror(
    stl_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Path to STL file to mirror",
    ),
    axis: Optional[str] = typer.Option(
        None,
        "--axis",
        "-a",
        help="Axis to mirror across: X, Y or Z (default from config)",
    ),
    threshold: Optional[int] = typer.Option(
        None,
        "--threshold",
        "-t",
        min=0,
        help="Components with at most this many triangles stay unmirrored",
    ),
    epsilon: Optional[float] = typer.Option(
        None,
        "--epsilon",
        "-e",
        help="Vertex coincidence tolerance in model units",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output STL file (default: <name>_mirrored_<axis>.stl)",
    ),
    ascii_output: bool = typer.Option(
        False,
        "--ascii",
        help="Write ASCII STL instead of binary",
    ),
    excluded_output: Optional[Path] = typer.Option(
        None,
        "--excluded-output",
        help="Also write the unmirrored triangles to this STL file",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file",
    ),
) -> None:
    """Mirror an STL file, keeping small disconnected features legible."""
    try:
        cfg = _load_config(config)
        if ascii_output:
            cfg = cfg.model_copy(
                update={"export": cfg.export.model_copy(update={"format": "ascii"})}
            )
        engine = MirrorEngine(cfg)

        mirror_axis = Axis.parse(axis if axis is not None else cfg.mirror.default_axis)
        output = output or _default_output(stl_file, mirror_axis)

        console.print(
            f"\n🪞 Mirroring [cyan]{stl_file.name}[/cyan] across {mirror_axis.value}..."
        )
        with console.status("Mirroring mesh..."):
            result = engine.process_file(
                stl_file, output, mirror_axis, threshold=threshold, epsilon=epsilon
            )

        table = Table(title="Mirror Result", show_header=False)
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="white")
        table.add_row("Output", str(output))
        table.add_row("Axis", mirror_axis.value)
        table.add_row("Triangles", f"{len(result.buffer):,}")
        table.add_row("Components", f"{result.classification.component_count:,}")
        table.add_row("Threshold", str(result.classification.threshold))
        table.add_row("Unmirrored triangles", f"{len(result.excluded_indices):,}")
        console.print(table)

        if excluded_output:
            if len(result.excluded_indices) == 0:
                console.print("[yellow]No unmirrored triangles to write[/yellow]")
            else:
                engine.save(excluded_output, result.buffer.subset(result.excluded_indices))
                console.print(
                    f"💾 Saved unmirrored triangles to [cyan]{excluded_output}[/cyan]"
                )

        console.print(f"✅ Saved mirrored mesh to [cyan]{output}[/cyan]")

    except (MirrorSafeError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def analyze(
    stl_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="Path to STL file to analyze",
    ),
    threshold: Optional[int] = typer.Option(
        None,
        "--threshold",
        "-t",
        min=0,
        help="Components with at most this many triangles stay unmirrored",
    ),
    epsilon: Optional[float] = typer.Option(
        None,
        "--epsilon",
        "-e",
        help="Vertex coincidence tolerance in model units",
    ),
    top: int = typer.Option(
        10,
        "--top",
        "-n",
        min=1,
        help="Number of components to list",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file",
    ),
) -> None:
    """Analyze an STL file's components and show which would stay unmirrored."""
    console.print(f"\n🔍 Analyzing [cyan]{stl_file.name}[/cyan]...")

    try:
        cfg = _load_config(config)
        engine = MirrorEngine(cfg)
        threshold = cfg.mirror.threshold if threshold is None else threshold
        epsilon = cfg.mirror.epsilon if epsilon is None else epsilon

        with console.status("Loading STL file..."):
            buffer = engine.load(stl_file)

        table = Table(title="Mesh Information", show_header=False)
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="white")

        table.add_row("File", str(stl_file))
        table.add_row("File Size", f"{stl_file.stat().st_size / 1024 / 1024:.2f} MB")
        table.add_row("Triangles", f"{len(buffer):,}")

        if len(buffer) == 0:
            console.print(table)
            console.print("[yellow]Mesh contains no triangles[/yellow]")
            return

        with console.status("Building topology..."):
            topology = build_topology(buffer, epsilon)
            classification = classify(len(buffer), topology, threshold)
            mesh = buffer.to_trimesh()

        bounds_min, bounds_max = buffer.bounds()
        extents = bounds_max - bounds_min
        table.add_row("Vertices", f"{topology.vertex_count:,}")
        table.add_row(
            "Bounding Box",
            f"[{bounds_min[0]:.2f}, {bounds_min[1]:.2f}, {bounds_min[2]:.2f}] to "
            f"[{bounds_max[0]:.2f}, {bounds_max[1]:.2f}, {bounds_max[2]:.2f}]"
        )
        table.add_row("Size", f"{extents[0]:.2f} x {extents[1]:.2f} x {extents[2]:.2f}")
        table.add_row("Watertight", "✅" if mesh.is_watertight else "❌")
        table.add_row("Surface Area", f"{mesh.area:.3f} units²")
        table.add_row("Components", f"{classification.component_count:,}")
        table.add_row(
            "Unmirrored",
            f"{len(classification.excluded):,} triangles in "
            f"{len(classification.excluded_components):,} components (≤ {threshold})",
        )
        console.print(table)

        sizes = classification.component_sizes
        largest = np.argsort(-sizes, kind="stable")[:top]
        components = Table(title=f"Largest {len(largest)} Components")
        components.add_column("Id", style="cyan", justify="right")
        components.add_column("Triangles", justify="right")
        components.add_column("Mirrored")
        for component in largest:
            components.add_row(
                str(component),
                f"{sizes[component]:,}",
                "no" if sizes[component] <= threshold else "yes",
            )
        console.print(components)

    except (MirrorSafeError, FileNotFoundError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


@app.command("config")
def write_config(
    path: Path = typer.Argument(
        Path("mirrorsafe.toml"),
        help="Where to write the default configuration",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite an existing file",
    ),
) -> None:
    """Write the default configuration as TOML."""
    if path.exists() and not force:
        console.print(f"[red]Error: {path} already exists (use --force)[/red]")
        raise typer.Exit(1)
    Config().save_toml(path)
    console.print(f"[green]Wrote default configuration to {path}[/green]")


@app.command()
def info() -> None:
    """Display information about MirrorSafe."""
    console.print("\n[cyan]MirrorSafe[/cyan] - STL mirroring that keeps text readable")
    console.print(f"Version: {__version__}")
    console.print("\nFeatures:")
    console.print("  • 🪞 Mirror across X, Y or Z with winding and normal repair")
    console.print("  • 🔤 Small disconnected components (text decals) stay unmirrored")
    console.print("  • 📄 Binary and ASCII STL input and output")
    console.print(f"\nAxes: {', '.join(axis.value for axis in Axis)}")


def main() -> None:
    """Main entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
