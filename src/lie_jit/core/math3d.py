# Copyright (c) 2025.
# This file is part of LIE-JIT, released under the MIT License.
"""
Low-level SO(3) / SE(3) math for LIE-JIT.

This module holds the closed-form building blocks the group classes in
`manifold/` are assembled from. Everything here is a pure function on
``jnp`` arrays, so it JIT-compiles, differentiates and vmaps.

Conventions
-----------
Quaternions are stored ``[x, y, z, w]`` (scalar last) and composed with the
Hamilton product. SE(3) tangent vectors are ``[rho, phi]``: linear block
first, angular block second.

Key Functions
-------------
hat(w), vee(W)
    so(3) hat operator and its inverse.

quat_multiply(a, b), quat_conjugate(q), quat_to_rotmat(q), quat_canonical(q)
    Unit-quaternion algebra.

quat_from_rpy(roll, pitch, yaw), quat_to_rpy(q)
    Euler-angle conversions (ZYX order).

so3_exp_quat(w), so3_log_quat(q)
    Exponential / logarithm between rotation vectors and unit quaternions.

so3_ljac(w), so3_rjac(w), so3_ljac_inv(w), so3_rjac_inv(w)
    Left / right Jacobians of SO(3) and their closed-form inverses.

se3_q_matrix(rho, phi)
    Off-diagonal block of the SE(3) left Jacobian.

Notes
-----
Every trigonometric ratio with a removable singularity at zero is switched to
its Taylor series below `SMALL_ANGLE_EPS` with ``jax.lax.cond``. The branch
predicate uses the squared angle so that the derivative at exactly zero stays
finite. The series are kept to fourth order because several of the ratios
(``(1 - cos t) / t^2``, ``(t^2 + 2 cos t - 2) / (2 t^4)``, ...) suffer from
cancellation well before the angle is tiny.
"""

from __future__ import annotations

from lie_jit.core.jax_init import jax, jnp

SMALL_ANGLE_EPS = 1e-2


def hat(v: jnp.ndarray) -> jnp.ndarray:
    """so(3) hat operator: R^3 -> 3x3 skew-symmetric matrix."""
    x, y, z = v[0], v[1], v[2]
    zero = jnp.zeros_like(x)
    return jnp.array(
        [
            [zero, -z, y],
            [z, zero, -x],
            [-y, x, zero],
        ]
    )


def vee(W: jnp.ndarray) -> jnp.ndarray:
    """
    vee: so(3) -> R^3, inverse of hat.
    Assumes W is a 3x3 skew-symmetric-like matrix.
    """
    return jnp.array([
        W[2, 1] - W[1, 2],
        W[0, 2] - W[2, 0],
        W[1, 0] - W[0, 1],
    ]) / 2.0


def _is_small(theta_sq: jnp.ndarray) -> jnp.ndarray:
    return theta_sq < SMALL_ANGLE_EPS * SMALL_ANGLE_EPS


# ---------------------------------------------------------------------------
# Quaternions
# ---------------------------------------------------------------------------

def quat_multiply(a: jnp.ndarray, b: jnp.ndarray) -> jnp.ndarray:
    """Hamilton product a ⊗ b of two [x, y, z, w] quaternions."""
    ax, ay, az, aw = a[0], a[1], a[2], a[3]
    bx, by, bz, bw = b[0], b[1], b[2], b[3]
    return jnp.array(
        [
            aw * bx + ax * bw + ay * bz - az * by,
            aw * by - ax * bz + ay * bw + az * bx,
            aw * bz + ax * by - ay * bx + az * bw,
            aw * bw - ax * bx - ay * by - az * bz,
        ]
    )


def quat_conjugate(q: jnp.ndarray) -> jnp.ndarray:
    return jnp.array([-q[0], -q[1], -q[2], q[3]])


def quat_canonical(q: jnp.ndarray) -> jnp.ndarray:
    """Representative of ±q with a non-negative scalar part."""
    return jnp.where(q[3] < 0.0, -q, q)


def quat_to_rotmat(q: jnp.ndarray) -> jnp.ndarray:
    """Rotation matrix of a unit quaternion [x, y, z, w]."""
    x, y, z, w = q[0], q[1], q[2], q[3]
    xx, yy, zz = x * x, y * y, z * z
    xy, xz, yz = x * y, x * z, y * z
    wx, wy, wz = w * x, w * y, w * z
    return jnp.array(
        [
            [1.0 - 2.0 * (yy + zz), 2.0 * (xy - wz), 2.0 * (xz + wy)],
            [2.0 * (xy + wz), 1.0 - 2.0 * (xx + zz), 2.0 * (yz - wx)],
            [2.0 * (xz - wy), 2.0 * (yz + wx), 1.0 - 2.0 * (xx + yy)],
        ]
    )


def quat_from_rpy(roll, pitch, yaw) -> jnp.ndarray:
    """Quaternion of R = Rz(yaw) Ry(pitch) Rx(roll)."""
    cr, sr = jnp.cos(0.5 * roll), jnp.sin(0.5 * roll)
    cp, sp = jnp.cos(0.5 * pitch), jnp.sin(0.5 * pitch)
    cy, sy = jnp.cos(0.5 * yaw), jnp.sin(0.5 * yaw)
    return jnp.array(
        [
            sr * cp * cy - cr * sp * sy,
            cr * sp * cy + sr * cp * sy,
            cr * cp * sy - sr * sp * cy,
            cr * cp * cy + sr * sp * sy,
        ]
    )


def quat_to_rpy(q: jnp.ndarray) -> jnp.ndarray:
    """Inverse of `quat_from_rpy`, returns [roll, pitch, yaw]."""
    x, y, z, w = q[0], q[1], q[2], q[3]
    roll = jnp.arctan2(2.0 * (w * x + y * z), 1.0 - 2.0 * (x * x + y * y))
    pitch = jnp.arcsin(jnp.clip(2.0 * (w * y - z * x), -1.0, 1.0))
    yaw = jnp.arctan2(2.0 * (w * z + x * y), 1.0 - 2.0 * (y * y + z * z))
    return jnp.array([roll, pitch, yaw])


# ---------------------------------------------------------------------------
# SO(3) exponential / logarithm
# ---------------------------------------------------------------------------

def so3_exp_quat(w: jnp.ndarray) -> jnp.ndarray:
    """
    Exponential map from so(3) (rotation vector) to a unit quaternion.

        q = [sin(theta/2) / theta * w, cos(theta/2)]
    """
    w = jnp.asarray(w)
    theta_sq = jnp.dot(w, w)

    def small_angle():
        s = 0.5 - theta_sq / 48.0 + theta_sq * theta_sq / 3840.0
        c = 1.0 - theta_sq / 8.0 + theta_sq * theta_sq / 384.0
        return s, c

    def normal_angle():
        theta = jnp.sqrt(theta_sq)
        return jnp.sin(0.5 * theta) / theta, jnp.cos(0.5 * theta)

    s, c = jax.lax.cond(_is_small(theta_sq), small_angle, normal_angle)
    return jnp.concatenate([s * w, jnp.array([c])])


def so3_log_quat(q: jnp.ndarray) -> jnp.ndarray:
    """
    Logarithm map from a unit quaternion to a rotation vector.

    The quaternion is first mapped to its canonical representative (w >= 0),
    so the returned angle lies in [0, pi].
    """
    q = quat_canonical(jnp.asarray(q))
    v = q[:3]
    w = q[3]
    n_sq = jnp.dot(v, v)

    def small_angle():
        # atan(x) / x with x = n / w
        x_sq = n_sq / (w * w)
        return 2.0 / w * (1.0 - x_sq / 3.0 + x_sq * x_sq / 5.0)

    def normal_angle():
        n = jnp.sqrt(n_sq)
        return 2.0 * jnp.arctan2(n, w) / n

    factor = jax.lax.cond(_is_small(n_sq), small_angle, normal_angle)
    return factor * v


# ---------------------------------------------------------------------------
# SO(3) Jacobians
# ---------------------------------------------------------------------------

def _so3_jac_coeffs(theta_sq: jnp.ndarray):
    """(1 - cos t) / t^2 and (t - sin t) / t^3."""

    def small_angle():
        a = 0.5 - theta_sq / 24.0 + theta_sq * theta_sq / 720.0
        b = 1.0 / 6.0 - theta_sq / 120.0 + theta_sq * theta_sq / 5040.0
        return a, b

    def normal_angle():
        theta = jnp.sqrt(theta_sq)
        a = (1.0 - jnp.cos(theta)) / theta_sq
        b = (theta - jnp.sin(theta)) / (theta_sq * theta)
        return a, b

    return jax.lax.cond(_is_small(theta_sq), small_angle, normal_angle)


def _so3_jac_inv_coeff(theta_sq: jnp.ndarray):
    """1 / t^2 - (1 + cos t) / (2 t sin t)."""

    def small_angle():
        return 1.0 / 12.0 + theta_sq / 720.0 + theta_sq * theta_sq / 30240.0

    def normal_angle():
        theta = jnp.sqrt(theta_sq)
        return 1.0 / theta_sq - (1.0 + jnp.cos(theta)) / (2.0 * theta * jnp.sin(theta))

    return jax.lax.cond(_is_small(theta_sq), small_angle, normal_angle)


def so3_ljac(w: jnp.ndarray) -> jnp.ndarray:
    """Left Jacobian: I + (1 - cos t)/t^2 W + (t - sin t)/t^3 W^2."""
    W = hat(w)
    a, b = _so3_jac_coeffs(jnp.dot(w, w))
    return jnp.eye(3) + a * W + b * (W @ W)


def so3_rjac(w: jnp.ndarray) -> jnp.ndarray:
    """Right Jacobian, Jr(w) = Jl(-w)."""
    W = hat(w)
    a, b = _so3_jac_coeffs(jnp.dot(w, w))
    return jnp.eye(3) - a * W + b * (W @ W)


def so3_ljac_inv(w: jnp.ndarray) -> jnp.ndarray:
    W = hat(w)
    c = _so3_jac_inv_coeff(jnp.dot(w, w))
    return jnp.eye(3) - 0.5 * W + c * (W @ W)


def so3_rjac_inv(w: jnp.ndarray) -> jnp.ndarray:
    W = hat(w)
    c = _so3_jac_inv_coeff(jnp.dot(w, w))
    return jnp.eye(3) + 0.5 * W + c * (W @ W)


# ---------------------------------------------------------------------------
# SE(3) Jacobian block
# ---------------------------------------------------------------------------

def se3_q_matrix(rho: jnp.ndarray, phi: jnp.ndarray) -> jnp.ndarray:
    """
    Upper-right block Q(rho, phi) of the SE(3) left Jacobian (Barfoot):

        Jl = [ Jl(phi)  Q(rho, phi) ]
             [   0        Jl(phi)   ]

        Q = 1/2 V + B (WV + VW + WVW)
                  + C (WWV + VWW - 3 WVW)
                  + D (WVWW + WWVW)

    with V = hat(rho), W = hat(phi) and
        B = (t - sin t) / t^3
        C = (t^2 + 2 cos t - 2) / (2 t^4)
        D = (2 t - 3 sin t + t cos t) / (2 t^5)
    """
    V = hat(rho)
    W = hat(phi)
    theta_sq = jnp.dot(phi, phi)

    def small_angle():
        t4 = theta_sq * theta_sq
        B = 1.0 / 6.0 - theta_sq / 120.0 + t4 / 5040.0
        C = 1.0 / 24.0 - theta_sq / 720.0 + t4 / 40320.0
        D = 1.0 / 120.0 - theta_sq / 2520.0 + t4 / 120960.0
        return B, C, D

    def normal_angle():
        theta = jnp.sqrt(theta_sq)
        s, c = jnp.sin(theta), jnp.cos(theta)
        B = (theta - s) / (theta_sq * theta)
        C = (theta_sq + 2.0 * c - 2.0) / (2.0 * theta_sq * theta_sq)
        D = (2.0 * theta - 3.0 * s + theta * c) / (2.0 * theta_sq * theta_sq * theta)
        return B, C, D

    B, C, D = jax.lax.cond(_is_small(theta_sq), small_angle, normal_angle)

    WV = W @ V
    VW = V @ W
    WVW = WV @ W
    WW = W @ W
    return (
        0.5 * V
        + B * (WV + VW + WVW)
        + C * (WW @ V + V @ WW - 3.0 * WVW)
        + D * (WVW @ W + W @ WVW)
    )
