# Copyright (c) 2025.
# This file is part of LIE-JIT, released under the MIT License.
"""
Experiment 01: De Casteljau curve fitting on SE(3).

Builds a coarse helical trajectory of rigid-body poses, fits open and closed
curves of increasing degree through it, and plots each fit over its control
polygon.
"""

from __future__ import annotations

import logging

import jax.numpy as jnp
import matplotlib.pyplot as plt

from lie_jit import SE3, CurveFitConfig, fit_curve
from lie_jit.visualization import plot_curve_fit_3d


def build_helix(num_poses: int = 8, radius: float = 1.0, pitch: float = 0.15):
    poses = []
    for i in range(num_poses):
        a = 2.0 * jnp.pi * i / num_poses
        poses.append(
            SE3.from_xyzrpy(radius * jnp.cos(a), radius * jnp.sin(a), pitch * i, 0.0, 0.2, a)
        )
    return poses


def run_experiment():
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    control_points = build_helix()

    for cfg in (
        CurveFitConfig(degree=2, k_interp=6),
        CurveFitConfig(degree=3, k_interp=6),
        CurveFitConfig(degree=4, k_interp=6, closed_curve=True),
    ):
        curve = fit_curve(control_points, cfg)
        print(
            f"degree={cfg.degree} closed={cfg.closed_curve}: "
            f"{len(control_points)} control points -> {len(curve)} curve samples"
        )
        fig, ax = plot_curve_fit_3d(control_points, curve, frame_scale=0.08)
        ax.set_title(f"De Casteljau on SE(3), degree {cfg.degree}")

    plt.show()


if __name__ == "__main__":
    run_experiment()
