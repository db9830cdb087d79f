from __future__ import annotations

import math

import jax
import jax.numpy as jnp
import pytest

from lie_jit import (
    IncompatibleGroupError,
    LieGroupBase,
    SE3,
    SE3Tangent,
    SO3,
    SO3Tangent,
    TangentBase,
)


def test_concrete_groups_conform_to_contract():
    for group, tangent, rep, dof in ((SO3, SO3Tangent, 4, 3), (SE3, SE3Tangent, 7, 6)):
        assert issubclass(group, LieGroupBase)
        assert issubclass(tangent, TangentBase)
        assert group.Tangent is tangent
        assert tangent.Group is group
        assert group.identity().coeffs().shape == (rep,)
        assert tangent.zero().coeffs().shape == (dof,)


def test_abstract_base_cannot_be_instantiated():
    with pytest.raises(TypeError):
        LieGroupBase(jnp.zeros(4))


def test_tangent_vector_space_ops():
    a = SE3Tangent(jnp.arange(6.0))
    b = SE3Tangent(jnp.ones(6))
    assert jnp.allclose((a + b).coeffs(), jnp.arange(6.0) + 1.0)
    assert jnp.allclose((a - b).coeffs(), jnp.arange(6.0) - 1.0)
    assert jnp.allclose((-a).coeffs(), -jnp.arange(6.0))
    assert jnp.allclose((a * 2.0).coeffs(), 2.0 * jnp.arange(6.0))
    assert jnp.allclose((0.5 * a).coeffs(), 0.5 * jnp.arange(6.0))
    assert jnp.allclose((a / 2.0).coeffs(), 0.5 * jnp.arange(6.0))
    assert jnp.allclose(a.plus(b).coeffs(), (a + b).coeffs())
    assert float(b.squared_weighted_norm()) == pytest.approx(6.0)
    assert float(b.weighted_norm(jnp.eye(6) * 4.0)) == pytest.approx(math.sqrt(24.0))
    assert float(a.inner(b)) == pytest.approx(15.0)


def test_tangent_plus_group_is_lplus():
    g = SE3.from_xyzrpy(1.0, 2.0, 3.0, 0.1, 0.2, 0.3)
    tau = SE3Tangent(jnp.array([0.1, 0.0, 0.0, 0.0, 0.0, 0.2]))
    assert (tau + g).is_approx(g.lplus(tau), eps=1e-12)
    assert tau.lplus(g).is_approx(tau.exp() * g, eps=1e-12)
    assert tau.rplus(g).is_approx(g * tau.exp(), eps=1e-12)


def test_operators_map_to_group_ops():
    a = SE3.from_xyzrpy(1.0, 0.0, 0.0, 0.0, 0.0, 0.5)
    b = SE3.from_xyzrpy(0.0, 1.0, 0.5, 0.2, 0.0, 0.0)
    assert (a * b).is_approx(a.compose(b), eps=1e-12)
    assert (b - a).is_approx(b.rminus(a), eps=1e-12)
    assert (a + (b - a)).is_approx(b, eps=1e-12)
    assert a.plus(b.minus(a)).is_approx(b, eps=1e-12)


def test_mixing_groups_raises():
    with pytest.raises(IncompatibleGroupError):
        SE3.identity().rminus(SO3.identity())
    with pytest.raises(IncompatibleGroupError):
        SO3.identity().rplus(SE3Tangent.zero())
    with pytest.raises(IncompatibleGroupError):
        SE3Tangent.zero() + SO3Tangent.zero()


def test_retract_alias():
    tau = SO3Tangent(jnp.array([0.1, 0.2, 0.3]))
    assert tau.retract().is_approx(tau.exp())


def test_elements_are_pytrees():
    g = SE3.from_xyzrpy(1.0, 2.0, 3.0, 0.1, 0.2, 0.3)
    leaves, treedef = jax.tree_util.tree_flatten(g)
    assert len(leaves) == 1
    rebuilt = jax.tree_util.tree_unflatten(treedef, leaves)
    assert isinstance(rebuilt, SE3)
    assert jnp.allclose(rebuilt.coeffs(), g.coeffs())


def test_grad_through_group_ops():
    target = SE3.from_xyzrpy(1.0, -1.0, 0.5, 0.3, -0.2, 0.1)

    def loss(c):
        return SE3Tangent(c).exp().rminus(target).squared_weighted_norm()

    g = jax.grad(loss)(jnp.zeros(6))
    assert jnp.all(jnp.isfinite(g))
    assert float(jnp.linalg.norm(g)) > 0.0
