# Copyright (c) 2025.
# This file is part of LIE-JIT, released under the MIT License.
"""
LIE-JIT: Lie group algebra for 3D rotations and rigid motions in JAX.

    • `SO3` / `SO3Tangent`, `SE3` / `SE3Tangent` with analytic Jacobians
    • `decasteljau`: curve fitting written only against the manifold
      contract of `LieGroupBase`
"""

from lie_jit.algorithms.decasteljau import (
    CurveFitConfig,
    decasteljau,
    decasteljau_segments,
    fit_curve,
)
from lie_jit.core.errors import (
    CurvePreconditionError,
    IncompatibleGroupError,
    JacobianNotImplementedError,
    LieJitError,
)
from lie_jit.core.types import JacobianSlot, Pose3
from lie_jit.manifold.base import LieGroupBase, TangentBase
from lie_jit.manifold.se3 import SE3, SE3Tangent
from lie_jit.manifold.so3 import SO3, SO3Tangent

__version__ = "0.1.0"

__all__ = [
    "CurveFitConfig",
    "CurvePreconditionError",
    "IncompatibleGroupError",
    "JacobianNotImplementedError",
    "JacobianSlot",
    "LieGroupBase",
    "LieJitError",
    "Pose3",
    "SE3",
    "SE3Tangent",
    "SO3",
    "SO3Tangent",
    "TangentBase",
    "decasteljau",
    "decasteljau_segments",
    "fit_curve",
]
