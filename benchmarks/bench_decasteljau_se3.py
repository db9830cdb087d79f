# Copyright (c) 2025.
# This file is part of LIE-JIT, released under the MIT License.

import time

import jax
import jax.numpy as jnp

from lie_jit import SE3, SE3Tangent, decasteljau


def build_random_trajectory(num_poses: int = 50, seed: int = 0):
    """
    Random walk on SE(3): each pose is the previous one right-perturbed by a
    small random twist.
    """
    key = jax.random.PRNGKey(seed)
    poses = [SE3.identity()]
    for _ in range(num_poses - 1):
        key, sub = jax.random.split(key)
        poses.append(poses[-1].rplus(SE3Tangent.random(sub, scale=0.3)))
    return poses


def bench_group_ops(num_iters: int = 1000):
    a = SE3.random(jax.random.PRNGKey(1))
    b = SE3.random(jax.random.PRNGKey(2))

    compose = jax.jit(lambda x, y: x.compose(y))
    rminus = jax.jit(lambda x, y: x.rminus(y))

    # Warmup (compilation)
    compose(a, b).coeffs().block_until_ready()
    rminus(a, b).coeffs().block_until_ready()

    t0 = time.perf_counter()
    for _ in range(num_iters):
        out = compose(a, b)
    out.coeffs().block_until_ready()
    t1 = time.perf_counter()
    for _ in range(num_iters):
        tau = rminus(a, b)
    tau.coeffs().block_until_ready()
    t2 = time.perf_counter()

    print(f"compose (jit): {1e6 * (t1 - t0) / num_iters:.2f} us/call")
    print(f"rminus  (jit): {1e6 * (t2 - t1) / num_iters:.2f} us/call")


def bench_decasteljau(num_poses: int = 50, degree: int = 4, k_interp: int = 10):
    traj = build_random_trajectory(num_poses)

    # Warmup (compilation for this degree / sample count)
    t0 = time.perf_counter()
    curve = decasteljau(traj, degree, k_interp)
    curve[-1].coeffs().block_until_ready()
    t1 = time.perf_counter()

    curve = decasteljau(traj, degree, k_interp)
    curve[-1].coeffs().block_until_ready()
    t2 = time.perf_counter()

    print(f"decasteljau: {num_poses} poses, degree {degree} -> {len(curve)} samples")
    print(f"  first call (incl. compile): {t1 - t0:.3f} s")
    print(f"  steady-state:               {t2 - t1:.3f} s")

    step = jnp.linalg.norm(curve[1].rminus(curve[0]).coeffs())
    print(f"  first step length in tangent space: {float(step):.4f}")


if __name__ == "__main__":
    bench_group_ops()
    bench_decasteljau()
