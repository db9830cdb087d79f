from __future__ import annotations

import jax
import jax.numpy as jnp
import pytest

from lie_jit import (
    CurveFitConfig,
    CurvePreconditionError,
    SE3,
    SE3Tangent,
    SO3,
    decasteljau,
    decasteljau_segments,
    fit_curve,
)

IDENTITY_QUAT = [0.0, 0.0, 0.0, 1.0]


def _translation(x, y, z) -> SE3:
    return SE3.from_translation_quat([x, y, z], IDENTITY_QUAT)


def _helix(n: int):
    return [
        SE3.from_xyzrpy(jnp.cos(0.5 * i), jnp.sin(0.5 * i), 0.1 * i, 0.0, 0.0, 0.5 * i)
        for i in range(n)
    ]


def test_degree_two_reaches_each_control_point():
    traj = [
        SE3Tangent.random(jax.random.PRNGKey(i), scale=1.0).exp() for i in range(4)
    ]
    curve = decasteljau(traj, degree=2, k_interp=1)
    assert len(curve) == 3
    for i, g in enumerate(curve):
        expected = traj[i].rplus(traj[i + 1].rminus(traj[i]) * 1.0)
        assert g.is_approx(expected, eps=1e-10)
        assert g.is_approx(traj[i + 1], eps=1e-10)


def test_degree_two_is_geodesic_interpolation():
    a = SE3.identity()
    b = SE3Tangent(jnp.array([1.0, 0.0, 0.0, 0.0, 0.0, 0.8])).exp()
    c = _translation(2.0, 1.0, 0.0)
    curve = decasteljau([a, b, c], degree=2, k_interp=4)
    assert len(curve) == 8
    mid = curve[1]  # t = 0.5 on the first segment
    assert mid.is_approx(a.rplus(b.rminus(a) * 0.5), eps=1e-10)


def test_pure_translations_reduce_to_bezier():
    p0, p1, p2 = _translation(0.0, 0.0, 0.0), _translation(1.0, 1.0, 0.0), _translation(2.0, 0.0, 0.0)
    curve = decasteljau([p0, p1, p2], degree=3, k_interp=2)
    # degree 3: k_interp * degree samples, t = 1/6 ... 1
    assert len(curve) == 6
    assert jnp.allclose(curve[2].translation(), jnp.array([1.0, 0.5, 0.0]), atol=1e-12)
    for k, g in enumerate(curve, start=1):
        t = k / 6.0
        expected = 2.0 * t * (1.0 - t) * jnp.array([1.0, 1.0, 0.0]) + t * t * jnp.array([2.0, 0.0, 0.0])
        assert jnp.allclose(g.translation(), expected, atol=1e-12)
        assert jnp.allclose(g.quat(), jnp.array(IDENTITY_QUAT), atol=1e-12)


def test_segment_partition_and_count():
    traj = _helix(7)
    segments = decasteljau_segments(traj, degree=3)
    # floor((7 - 3) / 2 + 1) = 3
    assert len(segments) == 3
    assert [len(s) for s in segments] == [3, 3, 3]
    assert segments[0][0] is traj[0]
    assert segments[1][0] is traj[2]
    assert segments[2][-1] is traj[6]

    curve = decasteljau(traj, degree=3, k_interp=5)
    assert len(curve) == 3 * 15
    # each segment ends on its last control point (t = 1)
    for s in range(3):
        assert curve[15 * (s + 1) - 1].is_approx(segments[s][-1], eps=1e-10)


def test_closed_curve_wraps_leftover_points():
    traj = _helix(4)
    segments = decasteljau_segments(traj, degree=3, closed_curve=True)
    # one full segment [0, 1, 2] then [2, 3, 0]
    assert len(segments) == 2
    assert [traj.index(m) for m in segments[1]] == [2, 3, 0]

    curve = decasteljau(traj, degree=3, k_interp=2, closed_curve=True)
    assert len(curve) == 2 * 6
    assert curve[-1].is_approx(traj[0], eps=1e-10)


def test_closed_curve_without_leftover_points_returns_to_start():
    traj = _helix(5)
    segments = decasteljau_segments(traj, degree=3, closed_curve=True)
    assert len(segments) == 3
    assert [traj.index(m) for m in segments[2]] == [4, 0, 1]


def test_open_curve_has_no_wrap_segment():
    traj = _helix(4)
    assert len(decasteljau_segments(traj, degree=3)) == 1


def test_works_on_rotation_group():
    traj = [SO3.from_rpy(0.0, 0.0, 0.4 * i) for i in range(5)]
    curve = decasteljau(traj, degree=3, k_interp=3)
    assert all(isinstance(g, SO3) for g in curve)
    assert len(curve) == 2 * 9
    # rotations about a common axis stay about that axis
    for g in curve:
        assert float(g.roll()) == pytest.approx(0.0, abs=1e-10)
        assert float(g.pitch()) == pytest.approx(0.0, abs=1e-10)
    assert curve[-1].is_approx(traj[-1], eps=1e-10)


def test_output_elements_are_unit_quaternions():
    curve = decasteljau(_helix(6), degree=4, k_interp=2)
    for g in curve:
        assert float(jnp.linalg.norm(g.quat())) == pytest.approx(1.0, abs=1e-10)


def test_fit_curve_matches_decasteljau():
    traj = _helix(5)
    cfg = CurveFitConfig(degree=3, k_interp=2, closed_curve=True)
    a = fit_curve(traj, cfg)
    b = decasteljau(traj, 3, 2, closed_curve=True)
    assert len(a) == len(b)
    for ga, gb in zip(a, b):
        assert jnp.allclose(ga.coeffs(), gb.coeffs())


@pytest.mark.parametrize(
    "n, degree, k_interp",
    [
        (2, 2, 1),   # trajectory too short
        (0, 2, 1),
        (4, 5, 1),   # degree exceeds trajectory length
        (4, 1, 1),   # degree below 2
        (4, 2, 0),   # no samples
    ],
)
def test_precondition_violations(n, degree, k_interp):
    traj = [_translation(float(i), 0.0, 0.0) for i in range(n)]
    with pytest.raises(CurvePreconditionError):
        decasteljau(traj, degree, k_interp)


def test_precondition_error_is_a_value_error():
    with pytest.raises(ValueError):
        decasteljau([SE3.identity()] * 2, 2, 1)


def test_mixed_group_types_rejected():
    traj = [SE3.identity(), SO3.identity(), SE3.identity()]
    with pytest.raises(CurvePreconditionError):
        decasteljau(traj, 2, 1)
