# Copyright (c) 2025.
# This file is part of LIE-JIT, released under the MIT License.
"""
Common JAX initialization for LIE-JIT.

The group algebra relies on double precision: the logarithm, the closed-form
Jacobians and their inverses all lose several digits in float32 around the
small-angle branches. This module enables x64 once, at import time, and is
imported by every module that builds arrays.

Usage:
    from lie_jit.core.jax_init import jax, jnp
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

jax.config.update("jax_enable_x64", True)

__all__ = ["jax", "jnp"]
