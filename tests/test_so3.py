from __future__ import annotations

import jax
import jax.numpy as jnp
import pytest

from lie_jit import JacobianNotImplementedError, JacobianSlot, SO3, SO3Tangent


def _random_so3(seed: int) -> SO3:
    return SO3Tangent.random(jax.random.PRNGKey(seed), scale=1.5).exp()


def test_identity_rotation_is_eye():
    R = SO3.identity()
    assert jnp.allclose(R.rotation(), jnp.eye(3))
    assert jnp.allclose(R.transform(), jnp.eye(3))
    assert jnp.allclose(R.lift().coeffs(), jnp.zeros(3))


def test_compose_with_inverse_is_identity():
    for seed in range(5):
        R = _random_so3(seed)
        assert (R * R.inverse()).is_approx(SO3.identity(), eps=1e-12)
        assert (R.inverse() * R).is_approx(SO3.identity(), eps=1e-12)


def test_compose_matches_matrix_product():
    a, b = _random_so3(1), _random_so3(2)
    assert jnp.allclose((a * b).rotation(), a.rotation() @ b.rotation(), atol=1e-12)


def test_exp_log_roundtrip():
    for seed in range(5):
        R = _random_so3(seed)
        assert R.lift().exp().is_approx(R, eps=1e-12)


def test_double_cover_lifts_to_same_tangent():
    R = _random_so3(3)
    R_neg = SO3(-R.coeffs())
    assert jnp.allclose(R_neg.lift().coeffs(), R.lift().coeffs(), atol=1e-12)
    assert R_neg.is_approx(R)


def test_random_is_unit_quaternion_with_non_negative_w():
    R = SO3.random(jax.random.PRNGKey(7))
    assert float(jnp.linalg.norm(R.quat())) == pytest.approx(1.0, abs=1e-12)
    assert float(R.w()) >= 0.0


def test_rplus_rminus_roundtrip():
    R = _random_so3(4)
    tau = SO3Tangent(jnp.array([0.2, -0.1, 0.3]))
    assert R.rplus(tau).rminus(R).is_approx(tau, eps=1e-12)


def test_act_rotates_vector():
    R = SO3.from_angle_axis(jnp.pi / 2, jnp.array([0.0, 0.0, 1.0]))
    J_v = JacobianSlot()
    v_out = R.act(jnp.array([1.0, 0.0, 0.0]), J_vout_v=J_v)
    assert jnp.allclose(v_out, jnp.array([0.0, 1.0, 0.0]), atol=1e-12)
    assert jnp.allclose(J_v.value, R.rotation())


def test_act_jacobian_wrt_element_not_implemented():
    R = _random_so3(5)
    with pytest.raises(JacobianNotImplementedError):
        R.act(jnp.ones(3), J_vout_m=JacobianSlot())
    with pytest.raises(NotImplementedError):
        R.act(jnp.ones(3), J_vout_m=JacobianSlot())


def test_rpy_constructor_and_readers():
    R = SO3.from_rpy(0.1, -0.2, 0.3)
    assert float(R.roll()) == pytest.approx(0.1, abs=1e-12)
    assert float(R.pitch()) == pytest.approx(-0.2, abs=1e-12)
    assert float(R.yaw()) == pytest.approx(0.3, abs=1e-12)


def test_adjoint_is_rotation():
    R = _random_so3(6)
    assert jnp.allclose(R.adj(), R.rotation())


def test_normalize():
    R = SO3(jnp.array([0.0, 0.0, 2.0, 2.0]))
    assert float(jnp.linalg.norm(R.normalize().quat())) == pytest.approx(1.0)


def test_bad_coefficient_shape_raises():
    with pytest.raises(ValueError):
        SO3(jnp.zeros(3))
