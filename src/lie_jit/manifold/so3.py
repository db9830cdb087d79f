# Copyright (c) 2025.
# This file is part of LIE-JIT, released under the MIT License.
"""
SO(3): the group of 3D rotations.

Elements are unit quaternions stored ``[x, y, z, w]``; tangents are rotation
vectors in R^3. `SE3` embeds an `SO3` for its rotational block.
"""

from __future__ import annotations

from lie_jit.core import math3d
from lie_jit.core.errors import JacobianNotImplementedError
from lie_jit.core.jax_init import jax, jnp
from lie_jit.core.types import Array
from lie_jit.manifold.base import LieGroupBase, OptJacobian, TangentBase


@jax.tree_util.register_pytree_node_class
class SO3(LieGroupBase):
    REP_SIZE = 4
    DOF = 3
    DIM = 3

    @classmethod
    def identity(cls) -> "SO3":
        return cls(jnp.array([0.0, 0.0, 0.0, 1.0]))

    @classmethod
    def random(cls, key: Array) -> "SO3":
        # Normalized Gaussian 4-vectors are uniform on S^3.
        q = jax.random.normal(key, (4,))
        return cls(math3d.quat_canonical(q / jnp.linalg.norm(q)))

    @classmethod
    def from_quat(cls, q) -> "SO3":
        return cls(q)

    @classmethod
    def from_rpy(cls, roll, pitch, yaw) -> "SO3":
        return cls(math3d.quat_from_rpy(roll, pitch, yaw))

    @classmethod
    def from_angle_axis(cls, angle, axis) -> "SO3":
        axis = jnp.asarray(axis, dtype=jnp.float64)
        return SO3Tangent(angle * axis / jnp.linalg.norm(axis)).exp()

    def quat(self) -> Array:
        return self._coeffs

    def x(self) -> Array:
        return self._coeffs[0]

    def y(self) -> Array:
        return self._coeffs[1]

    def z(self) -> Array:
        return self._coeffs[2]

    def w(self) -> Array:
        return self._coeffs[3]

    def roll(self) -> Array:
        return math3d.quat_to_rpy(self._coeffs)[0]

    def pitch(self) -> Array:
        return math3d.quat_to_rpy(self._coeffs)[1]

    def yaw(self) -> Array:
        return math3d.quat_to_rpy(self._coeffs)[2]

    def normalize(self) -> "SO3":
        return SO3(self._coeffs / jnp.linalg.norm(self._coeffs))

    def rotation(self) -> Array:
        return math3d.quat_to_rotmat(self._coeffs)

    def transform(self) -> Array:
        return self.rotation()

    def inverse(self, J_minv_m: OptJacobian = None) -> "SO3":
        if J_minv_m is not None:
            J_minv_m.set(-self.rotation())
        return SO3(math3d.quat_conjugate(self._coeffs))

    def lift(self, J_t_m: OptJacobian = None) -> "SO3Tangent":
        t = SO3Tangent(math3d.so3_log_quat(self._coeffs))
        if J_t_m is not None:
            J_t_m.set(t.rjacinv())
        return t

    def compose(
        self,
        other: "SO3",
        J_mc_ma: OptJacobian = None,
        J_mc_mb: OptJacobian = None,
    ) -> "SO3":
        self._check_same_group(other)
        if J_mc_ma is not None:
            J_mc_ma.set(other.rotation().T)
        if J_mc_mb is not None:
            J_mc_mb.set(jnp.eye(3))
        return SO3(math3d.quat_multiply(self._coeffs, other.coeffs()))

    def act(
        self,
        v: Array,
        J_vout_m: OptJacobian = None,
        J_vout_v: OptJacobian = None,
    ) -> Array:
        if J_vout_m is not None:
            raise JacobianNotImplementedError("SO3.act: Jacobian wrt the element")
        R = self.rotation()
        if J_vout_v is not None:
            J_vout_v.set(R)
        return R @ jnp.asarray(v)

    def adj(self) -> Array:
        return self.rotation()


@jax.tree_util.register_pytree_node_class
class SO3Tangent(TangentBase):
    DOF = 3
    DIM = 3
    Group = SO3

    def angle(self) -> Array:
        return jnp.linalg.norm(self._coeffs)

    def exp(self, J_m_t: OptJacobian = None) -> SO3:
        if J_m_t is not None:
            J_m_t.set(self.rjac())
        return SO3(math3d.so3_exp_quat(self._coeffs))

    def hat(self) -> Array:
        return math3d.hat(self._coeffs)

    def rjac(self) -> Array:
        return math3d.so3_rjac(self._coeffs)

    def ljac(self) -> Array:
        return math3d.so3_ljac(self._coeffs)

    def rjacinv(self) -> Array:
        return math3d.so3_rjac_inv(self._coeffs)

    def ljacinv(self) -> Array:
        return math3d.so3_ljac_inv(self._coeffs)

    def small_adj(self) -> Array:
        return self.hat()


SO3.Tangent = SO3Tangent
