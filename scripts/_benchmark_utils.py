from __future__ import annotations

import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Sequence

from pipetherm.model import Pipe, PipeOrientation
from pipetherm.thermal import CrossSection, FluxVector


@contextmanager
def timed(label: str, timings: Optional[List[tuple[str, float]]] = None) -> Iterator[None]:
    """Print (and optionally record) the wall-clock time spent in the block."""

    started = time.perf_counter()
    yield
    elapsed = time.perf_counter() - started
    if timings is not None:
        timings.append((label, elapsed))
    print(f"  {label:<28} {elapsed * 1000.0:9.1f} ms")


def save_cross_section_preview(
    section: CrossSection,
    pipes: Sequence[Pipe],
    output_path: Path,
    *,
    isotherms_c: Sequence[float] = (),
    flux_vectors: Sequence[FluxVector] = (),
    title: str = "Temperature cross-section",
    dpi: int = 150,
) -> Optional[Path]:
    """Render the section as a heatmap with pipe outlines; returns None without matplotlib."""

    try:
        import matplotlib.pyplot as plt
        from matplotlib import patches
    except ModuleNotFoundError:
        return None

    figure, axis = plt.subplots(figsize=(9, 5), constrained_layout=True)
    colour_plot = axis.pcolormesh(
        section.horizontal_m,
        section.depth_m,
        section.temperatures_c,
        shading="auto",
        cmap="inferno",
    )
    figure.colorbar(colour_plot, ax=axis, label="Temperature (°C)")

    if isotherms_c:
        contours = axis.contour(
            section.horizontal_m,
            section.depth_m,
            section.temperatures_c,
            levels=sorted(isotherms_c),
            colors="white",
            linewidths=0.8,
        )
        axis.clabel(contours, fmt="%.0f °C", fontsize=7)

    for pipe in pipes:
        if pipe.orientation is not PipeOrientation.PARALLEL:
            # Crossing pipes run along x and show up as a horizontal band in this plane.
            if abs(pipe.y_m - section.y_m) <= pipe.outer_radius_m:
                axis.axhspan(
                    pipe.depth_m - pipe.pipe_radius_m,
                    pipe.depth_m + pipe.pipe_radius_m,
                    edgecolor="#00c6ff",
                    facecolor="none",
                    linewidth=0.6,
                )
            continue
        for radius, style in ((pipe.outer_radius_m, "--"), (pipe.pipe_radius_m, "-")):
            axis.add_patch(
                patches.Circle(
                    (pipe.horizontal_m, pipe.depth_m),
                    radius=radius,
                    edgecolor="#00c6ff",
                    facecolor="none",
                    linestyle=style,
                    linewidth=0.6,
                )
            )

    if flux_vectors:
        axis.quiver(
            [vector.x_m for vector in flux_vectors],
            [vector.depth_m for vector in flux_vectors],
            [vector.flux_x for vector in flux_vectors],
            [vector.flux_z for vector in flux_vectors],
            angles="xy",
            color="black",
            alpha=0.6,
        )

    axis.set_xlabel("x (m)")
    axis.set_ylabel("depth (m)")
    axis.set_title(title)
    axis.set_aspect("equal", adjustable="box")
    axis.invert_yaxis()

    output_path.parent.mkdir(parents=True, exist_ok=True)
    figure.savefig(output_path, dpi=dpi)
    plt.close(figure)
    return output_path
