# Copyright (c) 2025.
# This file is part of LIE-JIT, released under the MIT License.
"""
Visualization utilities for LIE-JIT.

Lightweight Matplotlib rendering of trajectories of group elements, mostly
for debugging curve fits.

The pipeline follows two steps:

1. **Exporting frames**
   `export_trajectory_for_vis()` converts a sequence of group elements into
   `VisFrame` records: a 3D position and the three body axes. SE(3)
   elements use their translation; SO(3) elements are drawn as the image of
   the x-axis on the unit sphere.

2. **3D rendering**
   `plot_trajectory_3d()` draws the positions as a polyline and, optionally,
   the body axes as RGB segments. `plot_curve_fit_3d()` overlays a fitted
   curve on its control polygon.

Both plotting functions return the Matplotlib objects and only call
``plt.show()`` when asked, so they can be used headless.

Example usage is provided in `experiments/exp01_decasteljau_se3.py`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

from lie_jit.manifold.base import LieGroupBase

AXIS_COLORS = ("r", "g", "b")


@dataclass
class VisFrame:
    """Position and body axes (columns) of one trajectory element."""
    position: np.ndarray  # shape (3,)
    axes: np.ndarray      # shape (3, 3)


def _extract_position(m: LieGroupBase) -> np.ndarray:
    if hasattr(m, "translation"):
        return np.asarray(m.translation())
    return np.asarray(m.rotation()[:, 0])


def export_trajectory_for_vis(trajectory: Sequence[LieGroupBase]) -> List[VisFrame]:
    return [
        VisFrame(position=_extract_position(m), axes=np.asarray(m.rotation()))
        for m in trajectory
    ]


def _set_equal_aspect_3d(ax, frames: Sequence[VisFrame]) -> None:
    if not frames:
        return
    pts = np.stack([f.position for f in frames])
    mins, maxs = pts.min(axis=0), pts.max(axis=0)
    max_range = float(np.max(maxs - mins)) / 2.0
    if max_range < 1e-3:
        max_range = 1.0
    mid = 0.5 * (maxs + mins)
    ax.set_xlim(mid[0] - max_range * 1.1, mid[0] + max_range * 1.1)
    ax.set_ylim(mid[1] - max_range * 1.1, mid[1] + max_range * 1.1)
    ax.set_zlim(mid[2] - max_range * 1.1, mid[2] + max_range * 1.1)


def plot_trajectory_3d(
    trajectory: Sequence[LieGroupBase],
    ax=None,
    show_frames: bool = True,
    frame_scale: float = 0.1,
    color: str = "k",
    linestyle: str = "-",
    marker: Optional[str] = None,
    label: Optional[str] = None,
    show: bool = False,
):
    """
    Draw a trajectory of group elements in 3D.

    :param trajectory: Sequence of SE3 (or SO3) elements.
    :param ax: Existing 3D axes; a new figure is created when None.
    :param show_frames: Draw the body axes of each element.
    :param frame_scale: Length of the drawn body axes.
    :return: The 3D axes.
    """
    frames = export_trajectory_for_vis(trajectory)

    if ax is None:
        fig = plt.figure()
        ax = fig.add_subplot(111, projection="3d")

    if frames:
        pts = np.stack([f.position for f in frames])
        ax.plot(pts[:, 0], pts[:, 1], pts[:, 2],
                color=color, linestyle=linestyle, marker=marker, label=label)

    if show_frames:
        for f in frames:
            for k in range(3):
                tip = f.position + frame_scale * f.axes[:, k]
                ax.plot(
                    [f.position[0], tip[0]],
                    [f.position[1], tip[1]],
                    [f.position[2], tip[2]],
                    color=AXIS_COLORS[k],
                    linewidth=0.8,
                )

    ax.set_xlabel("x [m]")
    ax.set_ylabel("y [m]")
    ax.set_zlabel("z [m]")
    _set_equal_aspect_3d(ax, frames)

    if show:
        plt.show()
    return ax


def plot_curve_fit_3d(
    control_points: Sequence[LieGroupBase],
    curve: Sequence[LieGroupBase],
    frame_scale: float = 0.1,
    show: bool = False,
):
    """
    Overlay a fitted curve on its control polygon.

    :return: (fig, ax)
    """
    fig = plt.figure()
    ax = fig.add_subplot(111, projection="3d")

    plot_trajectory_3d(control_points, ax=ax, show_frames=False, color="gray",
                       linestyle="--", marker="o", label="control points")
    plot_trajectory_3d(curve, ax=ax, frame_scale=frame_scale, color="C0",
                       label="curve")
    _set_equal_aspect_3d(ax, export_trajectory_for_vis(list(control_points) + list(curve)))

    ax.set_title("LIE-JIT De Casteljau curve fit")
    ax.legend()
    fig.tight_layout()

    if show:
        plt.show()
    return fig, ax
