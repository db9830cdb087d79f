# Copyright (c) 2025.
# This file is part of LIE-JIT, released under the MIT License.
"""
Core typed data structures for LIE-JIT.

This module defines the small container classes shared by the group
implementations. They carry no numerical logic of their own; all math lives
in `core.math3d` and in the group classes under `manifold/`.

Classes
-------
JacobianSlot
    Caller-owned output slot for an optional Jacobian. Group operations take
    ``J_... = None`` keyword arguments; when a slot is passed, the operation
    writes the Jacobian into ``slot.value`` exactly once, otherwise no
    Jacobian work is performed.

Pose3
    Plain (x, y, z, roll, pitch, yaw) pose, convertible to an SE(3) element
    with ``SE3.from_pose3``.

Notes
-----
JAX arrays are immutable, so "writing into caller storage" means rebinding
``slot.value``. A slot can be reused across calls; each call overwrites it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import jax

Array = jax.Array


@dataclass
class JacobianSlot:
    """Optional output slot for a Jacobian matrix."""
    value: Optional[Array] = None

    def set(self, J: Array) -> None:
        self.value = J


@dataclass(frozen=True)
class Pose3:
    """Minimal 3D pose holder, angles in radians (ZYX / yaw-pitch-roll order)."""
    x: float
    y: float
    z: float
    roll: float
    pitch: float
    yaw: float
