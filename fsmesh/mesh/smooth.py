"""Nearest-neighbor smoothing of per-vertex data."""

import itertools
import logging

import numpy as np

logger = logging.getLogger(__name__)


def smooth_pvd_nn(adjlist, pvd, num_iter=1):
    """Smooth per-vertex data by repeatedly adding neighbor contributions.

    Each iteration updates all vertices from the values of the previous
    iteration only::

        new[v] = old[v] + sum(old[u] for u in adjlist[v]) / (len(adjlist[v]) + 1)

    The weights do not sum to one (the vertex itself keeps weight 1), so
    values grow with every iteration.  NaN values spread to all neighbors of
    a NaN vertex in the next iteration.

    Parameters
    ----------
    adjlist : list of sequence of int
        Neighbor lists, one per vertex, e.g. from
        :func:`fsmesh.mesh.adjacency.as_adjlist`.
    pvd : array-like, shape (N,)
        Per-vertex scalar values.
    num_iter : int, default=1
        Number of iterations; 0 returns a copy of *pvd*.

    Returns
    -------
    numpy.ndarray, shape (N,)
        The smoothed values, as float32 or the wider float type that
        ``numpy.result_type(pvd.dtype, float32)`` gives.  Neighbor sums are
        accumulated in that type, in neighbor-list order.

    Raises
    ------
    ValueError
        If *pvd* is not 1-D, its length differs from ``len(adjlist)``, a
        neighbor index is out of range, or *num_iter* is negative.
    """
    values = np.asarray(pvd)
    if values.ndim != 1:
        raise ValueError(f"pvd must be a 1-D array, got shape {values.shape}.")
    n_verts = len(adjlist)
    if values.shape[0] != n_verts:
        raise ValueError(
            f"pvd has {values.shape[0]} values but the adjacency list has "
            f"{n_verts} vertices."
        )
    if num_iter < 0:
        raise ValueError(f"num_iter must be >= 0, got {num_iter}.")

    dtype = np.result_type(values.dtype, np.float32)
    counts = np.fromiter((len(neigh) for neigh in adjlist), dtype=np.intp, count=n_verts)
    neighbors = np.fromiter(
        itertools.chain.from_iterable(adjlist), dtype=np.intp, count=int(counts.sum())
    )
    if neighbors.size and (int(neighbors.min()) < 0 or int(neighbors.max()) >= n_verts):
        raise ValueError(
            f"Neighbor indices out of range [0, {n_verts}) in adjacency list."
        )
    owners = np.repeat(np.arange(n_verts), counts)
    denom = (counts + 1).astype(dtype)

    current = values.astype(dtype, copy=True)
    for _ in range(num_iter):
        # unbuffered add.at accumulates in dtype, neighbor by neighbor
        neighbor_sum = np.zeros(n_verts, dtype=dtype)
        np.add.at(neighbor_sum, owners, current[neighbors])
        current = current + neighbor_sum / denom
    logger.debug("Smoothed %d values over %d iterations.", n_verts, num_iter)
    return current
