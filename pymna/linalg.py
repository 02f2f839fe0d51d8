"""Dense linear solver with singularity detection.

Solves A x = z by LU decomposition with partial pivoting
(jax.scipy.linalg.lu_factor / lu_solve). Nothing here knows about
circuits: it works for any square real or complex system.
"""

from __future__ import annotations
import logging
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array
from jax.scipy.linalg import lu_factor, lu_solve

from .errors import DimensionMismatch, SingularSystem

logger = logging.getLogger(__name__)


class LinearSolution(NamedTuple):
    """Result of a successful solve."""
    x: Array  # same shape as z
    determinant: complex


def equilibrate(A) -> tuple[Array, Array]:
    """
    Row and column scale factors that bring every row and column of A
    to a largest magnitude of 1.

    Returns (r, c) such that A / r[:, None] / c[None, :] is equilibrated.
    A zero row or column gets a scale of 0.
    """
    magnitude = jnp.abs(A)
    r = jnp.max(magnitude, axis=1)
    scaled = magnitude / jnp.where(r > 0, r, 1.0)[:, None]
    c = jnp.max(scaled, axis=0)
    return r, c


def solve_linear_system(A, z, tolerance: float | None = None) -> LinearSolution:
    """
    Solve A x = z.

    A is first equilibrated (every row, then every column, scaled to a
    largest magnitude of 1), so a circuit mixing milliohms with
    gigaohms is judged on its structure rather than on its spread of
    values. The system is declared singular when a pivot of the
    equilibrated LU factorisation is no larger than the threshold:
    n * machine epsilon by default, i.e. rows that are linearly
    dependent up to rounding.

    Args:
        A: Square matrix (n x n), real or complex
        z: Right-hand side, shape (n,) or (n, 1)
        tolerance: Pivot threshold on the equilibrated matrix
            (None for n * eps)

    Returns:
        LinearSolution with x and det(A)

    Raises:
        DimensionMismatch: A is not square or z does not match its rows
        SingularSystem: A has no (numerically) unique inverse
    """
    A = jnp.asarray(A)
    z = jnp.asarray(z)

    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise DimensionMismatch(f"Matrix A must be square, got shape {tuple(A.shape)}")
    n = A.shape[0]
    if z.ndim not in (1, 2) or z.shape[0] != n or (z.ndim == 2 and z.shape[1] != 1):
        raise DimensionMismatch(
            f"Incompatible dimensions: A is {n}x{n}, z has shape {tuple(z.shape)}")

    dtype = jnp.result_type(A.dtype, z.dtype, jnp.float64)
    A = A.astype(dtype)
    z = z.astype(dtype)

    if n == 0:
        return LinearSolution(x=z, determinant=complex(1.0))

    if float(jnp.max(jnp.abs(A))) == 0.0:
        logger.error("Singular system: A is the zero matrix")
        raise SingularSystem(detail="The system matrix is all zeros.")

    r, c = equilibrate(A)
    empty_rows = jnp.flatnonzero(r == 0)
    if empty_rows.size:
        logger.error("Singular system: rows %s are all zeros", empty_rows.tolist())
        raise SingularSystem(detail=f"Matrix rows {empty_rows.tolist()} are all zeros.")
    empty_cols = jnp.flatnonzero(c == 0)
    if empty_cols.size:
        logger.error("Singular system: columns %s are all zeros", empty_cols.tolist())
        raise SingularSystem(detail=f"Matrix columns {empty_cols.tolist()} are all zeros.")

    if tolerance is None:
        tolerance = n * float(jnp.finfo(dtype).eps)

    lu, piv = lu_factor(A / r[:, None] / c[None, :])
    pivots = jnp.abs(jnp.diagonal(lu))
    smallest = float(jnp.min(pivots))
    if not smallest > tolerance:
        row = int(jnp.argmin(pivots))
        logger.error("Singular system: equilibrated pivot %d is %.3e (threshold %.3e)",
                     row, smallest, tolerance)
        raise SingularSystem(
            detail=f"Equilibrated LU pivot {row} is {smallest:.3e}, "
                   f"not above the threshold {tolerance:.3e}.")

    y = lu_solve((lu, piv), z / r.reshape((n,) + (1,) * (z.ndim - 1)))
    x = y / c.reshape((n,) + (1,) * (z.ndim - 1))
    if not bool(jnp.all(jnp.isfinite(x))):
        logger.error("Singular system: solution contains NaN or Inf")
        raise SingularSystem(detail="The solution vector contains NaN or Inf values.")

    swaps = int(jnp.sum(piv != jnp.arange(n)))
    determinant = (complex(jnp.prod(jnp.diagonal(lu)))
                   * float(jnp.prod(r)) * float(jnp.prod(c)) * (-1) ** swaps)
    logger.debug("Solved %dx%d system, det(A) = %s", n, n, determinant)

    return LinearSolution(x=x, determinant=determinant)
