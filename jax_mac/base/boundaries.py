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
Classification of cell faces as solid boundaries.

The relaxation sweep asks, for every face of every cell, whether that face is
an obstacle. Obstacle faces receive neither gravity nor the divergence
correction and do not count toward the cell's weight.

Only the outer domain boundary is solid. The classifier looks at the queried
cell itself: a face is an obstacle exactly when `(x, y)` lies outside the
simulated `[0, N) x [0, N)` region, for every direction alike. There are no
interior solid cells.

A classifier is any callable with the `ObstacleFn` signature, so a different
one can be handed to the solver in place of `is_obstacle`.
"""
from typing import Callable

import jax
import jax.numpy as jnp

from jax_mac.base import faces
from jax_mac.base import grids

# --- Type Aliases ---
Grid = grids.Grid
IntOrArray = grids.IntOrArray
# (grid, x, y, direction) -> boolean scalar, True for a solid face.
ObstacleFn = Callable[[Grid, IntOrArray, IntOrArray, faces.Direction], jax.Array]


def is_obstacle(
    grid: Grid,
    x: IntOrArray,
    y: IntOrArray,
    direction: faces.Direction,
) -> jax.Array:
  """
  Returns whether the `direction` face of cell `(x, y)` is a solid boundary.

  Args:
    grid: The simulated grid.
    x: Logical column of the queried cell. May be a traced scalar.
    y: Logical row of the queried cell. May be a traced scalar.
    direction: The queried face. It does not change the result.

  Returns:
    A boolean JAX scalar, True iff `(x, y)` is outside the simulated region.
  """
  del direction  # The neighbor across the face is not inspected.
  return jnp.logical_not(grid.contains(x, y))


def open_faces(
    grid: Grid,
    x: IntOrArray,
    y: IntOrArray,
    obstacle_fn: ObstacleFn = is_obstacle,
) -> jax.Array:
  """
  Returns a boolean vector, ordered like `faces.DIRECTIONS`, of the faces of
  `(x, y)` that are not obstacles.
  """
  return jnp.stack([
      jnp.logical_not(obstacle_fn(grid, x, y, direction))
      for direction in faces.DIRECTIONS
  ])
