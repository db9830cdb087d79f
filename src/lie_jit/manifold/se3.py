# Copyright (c) 2025.
# This file is part of LIE-JIT, released under the MIT License.
"""
SE(3): rigid-body motions as the semidirect product of SO(3) and R^3.

Representation
--------------
Group element, 7 coefficients:

    [tx, ty, tz, qx, qy, qz, qw]

the translation block followed by an `SO3` unit quaternion. The rotational
block is handled by an embedded `SO3` (`as_so3()`), so composition, inversion
and the logarithm reuse the rotation group's closed forms.

Tangent element, 6 coefficients:

    [rho_x, rho_y, rho_z, phi_x, phi_y, phi_z]

linear block first, angular block second.

Closed forms
------------
    compose:   (R_a t_b + t_a,  q_a ⊗ q_b)
    inverse:   (-R^T t,  q*)
    lift:      phi = Log(q),  rho = Jl(phi)^-1 t
    exp:       q = Exp(phi),  t = Jl(phi) rho
    adj:       [ R   [t]x R ]
               [ 0     R    ]

Jacobians are given in the right-perturbation convention documented in
`manifold.base`.
"""

from __future__ import annotations

from lie_jit.core import math3d
from lie_jit.core.errors import JacobianNotImplementedError
from lie_jit.core.jax_init import jax, jnp
from lie_jit.core.types import Array, Pose3
from lie_jit.manifold.base import LieGroupBase, OptJacobian, TangentBase
from lie_jit.manifold.so3 import SO3, SO3Tangent


@jax.tree_util.register_pytree_node_class
class SE3(LieGroupBase):
    REP_SIZE = 7
    DOF = 6
    DIM = 3

    # -- constructors -------------------------------------------------------

    @classmethod
    def identity(cls) -> "SE3":
        return cls(jnp.array([0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 1.0]))

    @classmethod
    def random(cls, key: Array) -> "SE3":
        k_t, k_r = jax.random.split(key)
        t = jax.random.uniform(k_t, (3,), minval=-1.0, maxval=1.0)
        return cls.from_translation_rotation(t, SO3.random(k_r))

    @classmethod
    def from_translation_quat(cls, t, q) -> "SE3":
        t = jnp.asarray(t, dtype=jnp.float64)
        q = jnp.asarray(q, dtype=jnp.float64)
        return cls(jnp.concatenate([t, q]))

    @classmethod
    def from_translation_rotation(cls, t, rotation: SO3) -> "SE3":
        return cls.from_translation_quat(t, rotation.quat())

    @classmethod
    def from_xyzrpy(cls, x, y, z, roll, pitch, yaw) -> "SE3":
        return cls.from_translation_quat(
            jnp.array([x, y, z], dtype=jnp.float64),
            math3d.quat_from_rpy(roll, pitch, yaw),
        )

    @classmethod
    def from_pose3(cls, pose: Pose3) -> "SE3":
        return cls.from_xyzrpy(pose.x, pose.y, pose.z, pose.roll, pose.pitch, pose.yaw)

    # -- accessors ----------------------------------------------------------

    def as_so3(self) -> SO3:
        return SO3(self._coeffs[3:7])

    def translation(self) -> Array:
        return self._coeffs[0:3]

    def quat(self) -> Array:
        return self._coeffs[3:7]

    def rotation(self) -> Array:
        return self.as_so3().rotation()

    def x(self) -> Array:
        return self._coeffs[0]

    def y(self) -> Array:
        return self._coeffs[1]

    def z(self) -> Array:
        return self._coeffs[2]

    def to_pose3(self) -> Pose3:
        roll, pitch, yaw = math3d.quat_to_rpy(self.quat())
        return Pose3(
            float(self.x()), float(self.y()), float(self.z()),
            float(roll), float(pitch), float(yaw),
        )

    def normalize(self) -> "SE3":
        return SE3.from_translation_rotation(self.translation(), self.as_so3().normalize())

    def transform(self) -> Array:
        T = jnp.eye(4)
        T = T.at[:3, :3].set(self.rotation())
        T = T.at[:3, 3].set(self.translation())
        return T

    # -- group operations ---------------------------------------------------

    def inverse(self, J_minv_m: OptJacobian = None) -> "SE3":
        if J_minv_m is not None:
            J_minv_m.set(-self.adj())
        so3_inv = self.as_so3().inverse()
        return SE3.from_translation_rotation(
            -(self.rotation().T @ self.translation()), so3_inv
        )

    def lift(self, J_t_m: OptJacobian = None) -> "SE3Tangent":
        phi = self.as_so3().lift()
        rho = phi.ljacinv() @ self.translation()
        t = SE3Tangent(jnp.concatenate([rho, phi.coeffs()]))
        if J_t_m is not None:
            J_t_m.set(t.rjacinv())
        return t

    def compose(
        self,
        other: "SE3",
        J_mc_ma: OptJacobian = None,
        J_mc_mb: OptJacobian = None,
    ) -> "SE3":
        self._check_same_group(other)
        if J_mc_ma is not None:
            J_mc_ma.set(other.inverse().adj())
        if J_mc_mb is not None:
            J_mc_mb.set(jnp.eye(6))
        return SE3.from_translation_rotation(
            self.rotation() @ other.translation() + self.translation(),
            self.as_so3().compose(other.as_so3()),
        )

    def act(
        self,
        v: Array,
        J_vout_m: OptJacobian = None,
        J_vout_v: OptJacobian = None,
    ) -> Array:
        if J_vout_m is not None:
            raise JacobianNotImplementedError("SE3.act: Jacobian wrt the element")
        if J_vout_v is not None:
            J_vout_v.set(self.rotation())
        v_h = jnp.append(jnp.asarray(v, dtype=jnp.float64), 1.0)
        return (self.transform() @ v_h)[:3]

    def adj(self) -> Array:
        R = self.rotation()
        Adj = jnp.zeros((6, 6))
        Adj = Adj.at[:3, :3].set(R)
        Adj = Adj.at[3:, 3:].set(R)
        Adj = Adj.at[:3, 3:].set(math3d.hat(self.translation()) @ R)
        return Adj


@jax.tree_util.register_pytree_node_class
class SE3Tangent(TangentBase):
    DOF = 6
    DIM = 3
    Group = SE3

    def lin(self) -> Array:
        return self._coeffs[0:3]

    def ang(self) -> Array:
        return self._coeffs[3:6]

    def exp(self, J_m_t: OptJacobian = None) -> SE3:
        if J_m_t is not None:
            J_m_t.set(self.rjac())
        phi = SO3Tangent(self.ang())
        return SE3.from_translation_rotation(phi.ljac() @ self.lin(), phi.exp())

    def hat(self) -> Array:
        X = jnp.zeros((4, 4))
        X = X.at[:3, :3].set(math3d.hat(self.ang()))
        X = X.at[:3, 3].set(self.lin())
        return X

    def _jac(self, rho: Array, phi: Array) -> Array:
        Jl = math3d.so3_ljac(phi)
        J = jnp.zeros((6, 6))
        J = J.at[:3, :3].set(Jl)
        J = J.at[3:, 3:].set(Jl)
        J = J.at[:3, 3:].set(math3d.se3_q_matrix(rho, phi))
        return J

    def _jacinv(self, rho: Array, phi: Array) -> Array:
        Jl_inv = math3d.so3_ljac_inv(phi)
        Q = math3d.se3_q_matrix(rho, phi)
        J = jnp.zeros((6, 6))
        J = J.at[:3, :3].set(Jl_inv)
        J = J.at[3:, 3:].set(Jl_inv)
        J = J.at[:3, 3:].set(-Jl_inv @ Q @ Jl_inv)
        return J

    def ljac(self) -> Array:
        return self._jac(self.lin(), self.ang())

    def rjac(self) -> Array:
        # Jr(tau) = Jl(-tau)
        return self._jac(-self.lin(), -self.ang())

    def ljacinv(self) -> Array:
        return self._jacinv(self.lin(), self.ang())

    def rjacinv(self) -> Array:
        return self._jacinv(-self.lin(), -self.ang())

    def small_adj(self) -> Array:
        ad = jnp.zeros((6, 6))
        ad = ad.at[:3, :3].set(math3d.hat(self.ang()))
        ad = ad.at[3:, 3:].set(math3d.hat(self.ang()))
        ad = ad.at[:3, 3:].set(math3d.hat(self.lin()))
        return ad


SE3.Tangent = SE3Tangent
