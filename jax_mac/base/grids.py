# Copyright 2021 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""
Core data structures for the padded MAC grid and the state stored on it.

This module owns the storage of the simulation. The key concepts are:

- `Grid`: Static metadata describing the simulated resolution `N` and the
  padded resolution `N + 2`. A one-cell border surrounds the simulated region
  so that face lookups at the domain edge never leave the buffer.
- `FluidState`: The container for the two arrays that make up the state:
  a flat velocity buffer holding two scalars per padded cell (the velocity on
  the cell's right face and on its bottom face), and an unpadded `N x N`
  diagnostic grid holding the most recent pressure-like value of each cell.

Storing only the right and bottom face of every cell halves the memory of a
naive four-faces-per-cell layout: `2 (N + 2)^2` scalars instead of `4 N^2`.
The top and left faces of a cell are read through its neighbors, see `faces`.

`FluidState` is registered as a JAX PyTree, so the whole state can be carried
through `jax.jit` and `jax.lax.fori_loop`. Updates are functional: every write
returns a new `FluidState`.
"""
from __future__ import annotations

import dataclasses
import logging
import operator
from typing import Tuple, Union

import jax
import jax.numpy as jnp
from jax.tree_util import register_pytree_node_class
import numpy as np

logger = logging.getLogger(__name__)

# --- Type Aliases ---
Array = Union[np.ndarray, jax.Array]
# An integer index that may also be a traced JAX scalar inside compiled code.
IntOrArray = Union[int, jax.Array]

# Number of velocity scalars stored per padded cell: (right face, bottom face).
COMPONENTS_PER_CELL = 2

# Resolution of the simulated region used when none is given.
DEFAULT_RESOLUTION = 256


@dataclasses.dataclass(init=False, frozen=True)
class Grid:
  """
  Describes the simulated resolution and the padded layout of the buffers.

  The grid is immutable and hashable, so it can be used as static metadata in
  PyTrees and compiled functions.

  Attributes:
    resolution: The number of simulated cells `N` along each axis.
    padded_resolution: `N + 2`, the side length of the padded velocity buffer.
  """
  resolution: int
  padded_resolution: int

  def __init__(self, resolution: int):
    """Constructs a grid for an `N x N` simulated region."""
    resolution = operator.index(resolution)
    if resolution <= 0:
      raise ValueError(f'resolution must be positive, got {resolution}')
    # Use object.__setattr__ because the dataclass is frozen.
    object.__setattr__(self, 'resolution', resolution)
    object.__setattr__(self, 'padded_resolution', resolution + 2)

  @property
  def shape(self) -> Tuple[int, int]:
    """The shape `(N, N)` of the simulated region and the diagnostic grid."""
    return (self.resolution, self.resolution)

  @property
  def padded_shape(self) -> Tuple[int, int]:
    """The shape `(N + 2, N + 2)` of the padded velocity grid."""
    return (self.padded_resolution, self.padded_resolution)

  @property
  def velocity_size(self) -> int:
    """Length of the flat velocity buffer."""
    return COMPONENTS_PER_CELL * self.padded_resolution ** 2

  def padded_index(self, x: IntOrArray, y: IntOrArray) -> IntOrArray:
    """
    Returns the flat cell index of the logical cell `(x, y)` in the padded buffer.

    Logical coordinates run over `[-1, N]`; they are shifted by one along each
    axis so that the padding ring lands on rows and columns `0` and `N + 1`.
    """
    return (y + 1) * self.padded_resolution + (x + 1)

  def diagnostic_index(self, x: IntOrArray, y: IntOrArray) -> IntOrArray:
    """Returns the row-major index of cell `(x, y)` in the flat diagnostic read-out."""
    return y * self.resolution + x

  def contains(self, x: IntOrArray, y: IntOrArray) -> jax.Array:
    """True where `(x, y)` lies inside the simulated `[0, N) x [0, N)` region."""
    n = self.resolution
    return jnp.logical_and(
        jnp.logical_and(x >= 0, x < n),
        jnp.logical_and(y >= 0, y < n))


@register_pytree_node_class
@dataclasses.dataclass
class FluidState:
  """
  The velocity and diagnostic buffers of one simulation.

  Attributes:
    velocities: Flat buffer of length `2 (N + 2)^2`. Entry
      `2 * grid.padded_index(x, y) + c` holds the right-face velocity of cell
      `(x, y)` for `c == 0` and its bottom-face velocity for `c == 1`. Padding
      cells only ever receive writes from boundary-adjacent faces and are not
      live fluid state.
    pressure: The `(N, N)` diagnostic grid indexed `[y, x]`. It records the
      corrective pressure of the last relaxation of each cell and is never read
      back by the solver.
    grid: The static `Grid` both arrays are laid out on.
  """
  velocities: Array
  pressure: Array
  grid: Grid

  def tree_flatten(self):
    """
    Returns the flattening recipe for this class, required for JAX PyTree compatibility.
    The two buffers are the traced children; the grid is static auxiliary data.
    """
    children = (self.velocities, self.pressure)
    aux_data = (self.grid,)
    return children, aux_data

  @classmethod
  def tree_unflatten(cls, aux_data, children):
    """Defines how to reconstruct the object from its flattened parts."""
    return cls(*children, *aux_data)

  @property
  def resolution(self) -> int:
    """The simulated resolution `N`."""
    return self.grid.resolution

  @property
  def dtype(self):
    """The floating point type of the velocity buffer."""
    return self.velocities.dtype

  def cells(self) -> Array:
    """Returns the velocity buffer viewed as `(N + 2, N + 2, 2)`, indexed `[py, px, c]`."""
    return self.velocities.reshape(*self.grid.padded_shape, COMPONENTS_PER_CELL)


def allocate(resolution: int = DEFAULT_RESOLUTION) -> FluidState:
  """
  Creates a zero-filled state for an `N x N` simulated region.

  Args:
    resolution: The simulated resolution `N`. Must be positive.

  Returns:
    A `FluidState` with a padded velocity buffer of `2 (N + 2)^2` zeros and an
    `N x N` diagnostic grid of zeros.

  Raises:
    ValueError: if `resolution` is not positive.
  """
  grid = Grid(resolution)
  logger.debug('allocating %dx%d grid (%d velocity scalars)',
               grid.resolution, grid.resolution, grid.velocity_size)
  return FluidState(
      velocities=jnp.zeros(grid.velocity_size),
      pressure=jnp.zeros(grid.shape),
      grid=grid)


# The collaborator-facing name for allocation.
initialize = allocate


def reset(state: FluidState) -> FluidState:
  """Zero-fills both buffers of `state`, keeping its grid and dtype."""
  return dataclasses.replace(
      state,
      velocities=jnp.zeros_like(state.velocities),
      pressure=jnp.zeros_like(state.pressure))


def read_diagnostics(state: FluidState) -> np.ndarray:
  """
  Returns a host copy of the diagnostic grid, flattened row-major.

  The entry for cell `(x, y)` is at `grid.diagnostic_index(x, y)`, i.e.
  `y * N + x`. The result is a NumPy copy, so later solver updates never change it.
  """
  return np.array(state.pressure, copy=True).reshape(-1)
