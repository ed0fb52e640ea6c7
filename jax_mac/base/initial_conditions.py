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
Initial velocity fields.

Seeding writes all four faces of every cell, one cell at a time in the sweep
order (x outer, y inner). A face shared by two cells therefore ends up with the
value of whichever cell was written last.
"""
import dataclasses
from typing import Callable

import jax
import jax.numpy as jnp

from jax_mac.base import faces
from jax_mac.base import grids

FluidState = grids.FluidState
# (x, y) -> the speed written to every face of cell (x, y).
SpeedFn = Callable[[jax.Array, jax.Array], jax.Array]


def cellwise(state: FluidState, speed_fn: SpeedFn) -> FluidState:
  """
  Sets the four faces of each cell to `speed_fn(x, y)`, later cells winning.

  Args:
    state: The state to seed. Its diagnostic grid is left untouched.
    speed_fn: Function of the traced cell coordinates returning a scalar.

  Returns:
    A new `FluidState` with the seeded velocity buffer.
  """
  grid = state.grid
  n = grid.resolution

  def body(k, velocities):
    x, y = k // n, k % n
    speed = speed_fn(x, y)
    for direction in faces.DIRECTIONS:
      velocities = velocities.at[
          faces.face_index(grid, x, y, direction)].set(speed)
    return velocities

  velocities = jax.lax.fori_loop(0, n * n, body, state.velocities)
  return dataclasses.replace(state, velocities=velocities)


def disc(
    state: FluidState,
    radius: float = 0.7,
    speed: float = 10.0,
) -> FluidState:
  """
  Seeds `speed` on the faces of cells within `radius` of the domain center.

  Cell `(x, y)` is mapped to `(x, y) / N * 2 - 1`, so the domain spans
  `[-1, 1)` along each axis. All other faces are set to zero.
  """
  n = state.resolution

  def speed_fn(x, y):
    u = x / n * 2. - 1.
    v = y / n * 2. - 1.
    return jnp.where(jnp.hypot(u, v) < radius, speed, 0.)

  return cellwise(state, speed_fn)
