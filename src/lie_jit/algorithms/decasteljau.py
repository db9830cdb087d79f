# Copyright (c) 2025.
# This file is part of LIE-JIT, released under the MIT License.
"""
Curve fitting on Lie groups with the De Casteljau construction.

Given a discretized trajectory of group elements, this module produces a
denser, smoother trajectory made of piecewise Bézier-like curves. It is a
naive transposition of De Casteljau's algorithm to Lie groups: the Euclidean
affine combination

    (1 - t) P + t Q

is replaced by moving from P toward Q by a fraction t of their local
difference,

    P.rplus(Q.rminus(P) * t)

so the only capabilities required from the group type are `rplus` and
`rminus`. Any `LieGroupBase` subclass (`SO3`, `SE3`, ...) works unchanged.

Algorithm
---------
1. The trajectory is split into overlapping windows of `degree` control
   points, each window starting `degree - 1` points after the previous one:

       n_segments = floor((N - degree) / (degree - 1) + 1)

2. With `closed_curve`, one more window wraps around: the remaining tail of
   the trajectory followed by points from its start.
3. Every window is sampled at t = i / K, i = 1..K, with K = k_interp for
   degree 2 and K = k_interp * degree otherwise, so higher-order segments
   (which span more control points) keep a similar sampling density.
4. Each sample is reduced with `degree - 1` rounds of pairwise
   interpolation down to a single element.

With degree 2 this is exactly piecewise geodesic interpolation between
consecutive control points.

The per-window evaluation is JIT-compiled and vmapped over the sample
parameters; compilation is cached per (group type, degree, K).

Reference: https://en.wikipedia.org/wiki/De_Casteljau%27s_algorithm
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from lie_jit.core.errors import CurvePreconditionError
from lie_jit.core.jax_init import jax, jnp
from lie_jit.core.types import Array
from lie_jit.manifold.base import LieGroupBase

_logger = logging.getLogger(__name__)


@dataclass
class CurveFitConfig:
    degree: int = 3
    k_interp: int = 10
    closed_curve: bool = False


def _check_trajectory(trajectory: Sequence[LieGroupBase], degree: int) -> None:
    if len(trajectory) <= 2:
        raise CurvePreconditionError(
            f"trajectory must hold more than 2 elements, got {len(trajectory)}"
        )
    if degree < 2:
        raise CurvePreconditionError(f"degree must be at least 2, got {degree}")
    if degree > len(trajectory):
        raise CurvePreconditionError(
            f"degree ({degree}) exceeds the trajectory length ({len(trajectory)})"
        )
    group = type(trajectory[0])
    if not isinstance(trajectory[0], LieGroupBase):
        raise CurvePreconditionError(
            f"trajectory elements must be Lie group elements, got {group.__name__}"
        )
    for i, m in enumerate(trajectory):
        if type(m) is not group:
            raise CurvePreconditionError(
                f"trajectory mixes group types: element {i} is {type(m).__name__}, "
                f"expected {group.__name__}"
            )


def decasteljau_segments(
    trajectory: Sequence[LieGroupBase],
    degree: int,
    closed_curve: bool = False,
) -> List[List[LieGroupBase]]:
    """
    Partition a trajectory into the control-point windows of the curve fit.

    Returns one list of `degree` elements per segment. Consecutive segments
    share their boundary element.
    """
    _check_trajectory(trajectory, degree)

    n = len(trajectory)
    step = degree - 1
    n_segments = (n - degree) // step + 1

    segments = [
        list(trajectory[s * step: s * step + degree]) for s in range(n_segments)
    ]

    # Index of the last element used by the last full segment.
    last = n_segments * step
    if closed_curve and last <= n - 1:
        left_over = n - 1 - last
        wrap = list(trajectory[last:]) + list(trajectory[: degree - left_over - 1])
        segments.append(wrap)

    return segments


def _segment_curve(control_points: Tuple[LieGroupBase, ...], ts: Array) -> LieGroupBase:
    """Evaluate one segment at every parameter in `ts` (batched element)."""

    def point_at(t):
        qs = list(control_points)
        while len(qs) > 1:
            qs = [qs[q].rplus(qs[q + 1].rminus(qs[q]) * t) for q in range(len(qs) - 1)]
        return qs[0]

    return jax.vmap(point_at)(ts)


_segment_curve_jit = jax.jit(_segment_curve)


def decasteljau(
    trajectory: Sequence[LieGroupBase],
    degree: int,
    k_interp: int,
    closed_curve: bool = False,
) -> List[LieGroupBase]:
    """
    Fit a smooth curve through a trajectory of Lie group elements.

    Args:
        trajectory: sequence of elements of one concrete group, len > 2.
        degree: number of control points per segment, 2 <= degree <= len.
        k_interp: number of samples per segment (scaled by degree when
            degree != 2), > 0.
        closed_curve: add a wrap-around segment back to the start.

    Returns:
        The sampled curve, segment by segment with ascending t. Elements have
        the same type as the input.

    Raises:
        CurvePreconditionError: on malformed inputs, before any computation.
    """
    if k_interp <= 0:
        raise CurvePreconditionError(f"k_interp must be positive, got {k_interp}")

    segments = decasteljau_segments(trajectory, degree, closed_curve)
    group = type(trajectory[0])

    segment_k_interp = k_interp if degree == 2 else k_interp * degree
    ts = jnp.arange(1, segment_k_interp + 1, dtype=jnp.float64) / segment_k_interp

    _logger.debug(
        "decasteljau: %d %s control points, degree %d, %d segments x %d samples (closed=%s)",
        len(trajectory), group.__name__, degree, len(segments), segment_k_interp, closed_curve,
    )

    curve: List[LieGroupBase] = []
    for seg in segments:
        batched = _segment_curve_jit(tuple(seg), ts)
        curve.extend(group(c) for c in batched.coeffs())

    return curve


def fit_curve(trajectory: Sequence[LieGroupBase], cfg: CurveFitConfig) -> List[LieGroupBase]:
    """`decasteljau` driven by a `CurveFitConfig`."""
    return decasteljau(trajectory, cfg.degree, cfg.k_interp, cfg.closed_curve)
