# Copyright (c) 2025.
# This file is part of LIE-JIT, released under the MIT License.
"""
Abstract manifold contract for LIE-JIT.

Every concrete Lie group (currently `SO3` and `SE3`) derives from
`LieGroupBase` and pairs with a tangent type derived from `TangentBase`.
The concrete classes provide the handful of closed-form primitives:

    • coeffs / transform / rotation
    • inverse, compose, lift (logarithm), act, adj
    • identity / random constructors

and this module derives everything else from them, once:

    • rplus / lplus   (g ∘ Exp(τ), Exp(τ) ∘ g)
    • rminus / lminus (Log(h⁻¹ ∘ g), Log(g ∘ h⁻¹))
    • between         (g⁻¹ ∘ h)
    • operators: g * h (compose), g + τ (rplus), g - h (rminus)

Generic algorithms such as `algorithms.decasteljau` only use `rplus` and
`rminus`, so they run unchanged on any conforming group.

Jacobians
---------
All Jacobians follow the right-perturbation convention

    J = d( f(x ⊕ δ) ⊖ f(x) ) / dδ   at δ = 0

and are returned through optional `JacobianSlot` arguments. When a slot is
``None`` the corresponding Jacobian is never computed.

JAX integration
---------------
Group and tangent elements are registered pytrees (their single child is the
coefficient vector), so they can be passed through ``jax.jit``, ``jax.vmap``
and ``jax.grad`` like plain arrays.
"""

from __future__ import annotations

import abc
from typing import ClassVar, Optional, Type

from lie_jit.core.errors import IncompatibleGroupError
from lie_jit.core.jax_init import jax, jnp
from lie_jit.core.types import Array, JacobianSlot

OptJacobian = Optional[JacobianSlot]

DEFAULT_TOL = 1e-9


def _as_coeffs(coeffs, size: int, name: str) -> Array:
    c = jnp.asarray(coeffs, dtype=jnp.float64)
    if c.shape != (size,):
        raise ValueError(f"{name} expects {size} coefficients, got shape {c.shape}")
    return c


class LieGroupBase(abc.ABC):
    """Abstract Lie group element."""

    #: Size of the coefficient vector.
    REP_SIZE: ClassVar[int]
    #: Degrees of freedom (tangent dimension).
    DOF: ClassVar[int]
    #: Dimension of the space the group acts on.
    DIM: ClassVar[int]
    #: Matching tangent type, set by each concrete group.
    Tangent: ClassVar[Type["TangentBase"]]

    def __init__(self, coeffs) -> None:
        self._coeffs = _as_coeffs(coeffs, self.REP_SIZE, type(self).__name__)

    # -- pytree -------------------------------------------------------------

    def tree_flatten(self):
        return (self._coeffs,), None

    @classmethod
    def tree_unflatten(cls, aux_data, children):
        obj = cls.__new__(cls)
        obj._coeffs = children[0]
        return obj

    # -- coefficient access -------------------------------------------------

    def coeffs(self) -> Array:
        return self._coeffs

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._coeffs})"

    def _check_same_group(self, other) -> None:
        if not isinstance(other, type(self)):
            raise IncompatibleGroupError(
                f"cannot combine {type(self).__name__} with {type(other).__name__}"
            )

    # -- per-group primitives -----------------------------------------------

    @classmethod
    @abc.abstractmethod
    def identity(cls) -> "LieGroupBase":
        """Identity element of the group."""

    @classmethod
    @abc.abstractmethod
    def random(cls, key: Array) -> "LieGroupBase":
        """Random element drawn with a JAX PRNG key."""

    @abc.abstractmethod
    def transform(self) -> Array:
        """Standard matrix representation of the element."""

    @abc.abstractmethod
    def rotation(self) -> Array:
        """3x3 rotation matrix of the element."""

    @abc.abstractmethod
    def inverse(self, J_minv_m: OptJacobian = None) -> "LieGroupBase":
        """Group inverse. J_minv_m = -Adj(m)."""

    @abc.abstractmethod
    def lift(self, J_t_m: OptJacobian = None) -> "TangentBase":
        """Logarithmic map. J_t_m = Jr(τ)^-1."""

    @abc.abstractmethod
    def compose(
        self,
        other: "LieGroupBase",
        J_mc_ma: OptJacobian = None,
        J_mc_mb: OptJacobian = None,
    ) -> "LieGroupBase":
        """Group product self ∘ other. J_mc_ma = Adj(other)^-1, J_mc_mb = I."""

    @abc.abstractmethod
    def act(
        self,
        v: Array,
        J_vout_m: OptJacobian = None,
        J_vout_v: OptJacobian = None,
    ) -> Array:
        """Group action on a point."""

    @abc.abstractmethod
    def adj(self) -> Array:
        """Adjoint matrix, DOF x DOF."""

    # -- derived operations -------------------------------------------------

    def log(self, J_t_m: OptJacobian = None) -> "TangentBase":
        return self.lift(J_t_m)

    def set_identity(self):
        """Reset to the identity element in place and return self."""
        self._coeffs = type(self).identity().coeffs()
        return self

    def rplus(
        self,
        t: "TangentBase",
        J_mout_m: OptJacobian = None,
        J_mout_t: OptJacobian = None,
    ) -> "LieGroupBase":
        """Right retraction: self ∘ Exp(t)."""
        if not isinstance(t, self.Tangent):
            raise IncompatibleGroupError(
                f"{type(self).__name__}.rplus expects {self.Tangent.__name__}, "
                f"got {type(t).__name__}"
            )
        exp_t = t.exp()
        if J_mout_t is not None:
            J_mout_t.set(t.rjac())
        if J_mout_m is not None:
            J_mout_m.set(exp_t.inverse().adj())
        return self.compose(exp_t)

    def lplus(
        self,
        t: "TangentBase",
        J_mout_m: OptJacobian = None,
        J_mout_t: OptJacobian = None,
    ) -> "LieGroupBase":
        """Left retraction: Exp(t) ∘ self."""
        if not isinstance(t, self.Tangent):
            raise IncompatibleGroupError(
                f"{type(self).__name__}.lplus expects {self.Tangent.__name__}, "
                f"got {type(t).__name__}"
            )
        if J_mout_t is not None:
            J_mout_t.set(self.inverse().adj() @ t.rjac())
        if J_mout_m is not None:
            J_mout_m.set(jnp.eye(self.DOF))
        return t.exp().compose(self)

    def plus(self, t, J_mout_m: OptJacobian = None, J_mout_t: OptJacobian = None):
        return self.rplus(t, J_mout_m, J_mout_t)

    def rminus(
        self,
        other: "LieGroupBase",
        J_t_ma: OptJacobian = None,
        J_t_mb: OptJacobian = None,
    ) -> "TangentBase":
        """
        Right local difference: Log(other⁻¹ ∘ self).

        Satisfies ``other.rplus(self.rminus(other)) == self``.
        """
        self._check_same_group(other)
        t = other.inverse().compose(self).lift()
        if J_t_ma is not None:
            J_t_ma.set(t.rjacinv())
        if J_t_mb is not None:
            J_t_mb.set(-t.ljacinv())
        return t

    def lminus(
        self,
        other: "LieGroupBase",
        J_t_ma: OptJacobian = None,
        J_t_mb: OptJacobian = None,
    ) -> "TangentBase":
        """Left local difference: Log(self ∘ other⁻¹)."""
        self._check_same_group(other)
        t = self.compose(other.inverse()).lift()
        if J_t_ma is not None or J_t_mb is not None:
            J = t.rjacinv() @ other.adj()
            if J_t_ma is not None:
                J_t_ma.set(J)
            if J_t_mb is not None:
                J_t_mb.set(-J)
        return t

    def minus(self, other, J_t_ma: OptJacobian = None, J_t_mb: OptJacobian = None):
        return self.rminus(other, J_t_ma, J_t_mb)

    def between(
        self,
        other: "LieGroupBase",
        J_mc_ma: OptJacobian = None,
        J_mc_mb: OptJacobian = None,
    ) -> "LieGroupBase":
        """Relative element self⁻¹ ∘ other."""
        self._check_same_group(other)
        mc = self.inverse().compose(other)
        if J_mc_ma is not None:
            J_mc_ma.set(-mc.inverse().adj())
        if J_mc_mb is not None:
            J_mc_mb.set(jnp.eye(self.DOF))
        return mc

    def is_approx(self, other: "LieGroupBase", eps: float = DEFAULT_TOL) -> bool:
        """True if other is within eps of self, measured in the tangent space."""
        self._check_same_group(other)
        return bool(jnp.all(jnp.abs(self.rminus(other).coeffs()) <= eps))

    # -- operators ----------------------------------------------------------

    def __mul__(self, other: "LieGroupBase") -> "LieGroupBase":
        return self.compose(other)

    def __add__(self, t: "TangentBase") -> "LieGroupBase":
        return self.rplus(t)

    def __sub__(self, other: "LieGroupBase") -> "TangentBase":
        return self.rminus(other)


class TangentBase(abc.ABC):
    """Abstract Lie algebra element, stored as a DOF-vector."""

    DOF: ClassVar[int]
    DIM: ClassVar[int]
    Group: ClassVar[Type[LieGroupBase]]

    def __init__(self, coeffs) -> None:
        self._coeffs = _as_coeffs(coeffs, self.DOF, type(self).__name__)

    def tree_flatten(self):
        return (self._coeffs,), None

    @classmethod
    def tree_unflatten(cls, aux_data, children):
        obj = cls.__new__(cls)
        obj._coeffs = children[0]
        return obj

    def coeffs(self) -> Array:
        return self._coeffs

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._coeffs})"

    @classmethod
    def zero(cls) -> "TangentBase":
        return cls(jnp.zeros(cls.DOF))

    @classmethod
    def random(cls, key: Array, scale: float = 1.0) -> "TangentBase":
        """Tangent with coefficients uniform in [-scale, scale]."""
        return cls(jax.random.uniform(key, (cls.DOF,), minval=-scale, maxval=scale))

    def _check_same_type(self, other) -> None:
        if not isinstance(other, type(self)):
            raise IncompatibleGroupError(
                f"cannot combine {type(self).__name__} with {type(other).__name__}"
            )

    # -- per-group primitives -----------------------------------------------

    @abc.abstractmethod
    def exp(self, J_m_t: OptJacobian = None) -> LieGroupBase:
        """Exponential map. J_m_t = Jr(τ)."""

    @abc.abstractmethod
    def hat(self) -> Array:
        """Lie algebra matrix of the tangent."""

    @abc.abstractmethod
    def rjac(self) -> Array:
        """Right Jacobian of the exponential map."""

    @abc.abstractmethod
    def ljac(self) -> Array:
        """Left Jacobian of the exponential map."""

    @abc.abstractmethod
    def small_adj(self) -> Array:
        """Adjoint of the Lie algebra, ad(τ)."""

    # -- derived operations -------------------------------------------------

    def rjacinv(self) -> Array:
        return jnp.linalg.inv(self.rjac())

    def ljacinv(self) -> Array:
        return jnp.linalg.inv(self.ljac())

    def retract(self, J_m_t: OptJacobian = None) -> LieGroupBase:
        return self.exp(J_m_t)

    def rplus(self, m: LieGroupBase) -> LieGroupBase:
        """m ∘ Exp(self)."""
        return m.rplus(self)

    def lplus(self, m: LieGroupBase) -> LieGroupBase:
        """Exp(self) ∘ m."""
        return m.lplus(self)

    def plus(self, other: "TangentBase") -> "TangentBase":
        self._check_same_type(other)
        return type(self)(self._coeffs + other.coeffs())

    def minus(self, other: "TangentBase") -> "TangentBase":
        self._check_same_type(other)
        return type(self)(self._coeffs - other.coeffs())

    def inner(self, other: "TangentBase", W: Optional[Array] = None) -> Array:
        self._check_same_type(other)
        if W is None:
            return jnp.dot(self._coeffs, other.coeffs())
        return self._coeffs @ W @ other.coeffs()

    def squared_weighted_norm(self, W: Optional[Array] = None) -> Array:
        return self.inner(self, W)

    def weighted_norm(self, W: Optional[Array] = None) -> Array:
        return jnp.sqrt(self.squared_weighted_norm(W))

    def is_approx(self, other: "TangentBase", eps: float = DEFAULT_TOL) -> bool:
        self._check_same_type(other)
        return bool(jnp.all(jnp.abs(self._coeffs - other.coeffs()) <= eps))

    # -- operators ----------------------------------------------------------

    def __add__(self, other):
        if isinstance(other, LieGroupBase):
            return other.lplus(self)
        return self.plus(other)

    def __sub__(self, other: "TangentBase") -> "TangentBase":
        return self.minus(other)

    def __neg__(self) -> "TangentBase":
        return type(self)(-self._coeffs)

    def __mul__(self, scalar) -> "TangentBase":
        return type(self)(self._coeffs * scalar)

    def __rmul__(self, scalar) -> "TangentBase":
        return type(self)(scalar * self._coeffs)

    def __truediv__(self, scalar) -> "TangentBase":
        return type(self)(self._coeffs / scalar)
