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
Vectorized difference operators on the MAC grid.

These operate on whole slices of the padded velocity buffer at once and are
meant for monitoring: they measure how far the field is from being
divergence-free but never feed back into the relaxation sweep.
"""
import jax
import jax.numpy as jnp

from jax_mac.base import faces
from jax_mac.base import grids

FluidState = grids.FluidState


def divergence(state: FluidState) -> jax.Array:
  """
  Computes `(right - left) + (up - down)` for every simulated cell.

  This is the same quantity the relaxation sweep corrects, without the
  over-relaxation factor, evaluated on the current field in one pass.

  Args:
    state: The simulation state.

  Returns:
    An `(N, N)` array indexed `[y, x]`, laid out like `state.pressure`.
  """
  n = state.resolution
  cells = state.cells()
  # Rows and columns 1..N of the padded buffer are the simulated cells.
  right = cells[1:n + 1, 1:n + 1, faces.RIGHT_COMPONENT]
  left = cells[1:n + 1, 0:n, faces.RIGHT_COMPONENT]
  down = cells[1:n + 1, 1:n + 1, faces.BOTTOM_COMPONENT]
  up = cells[2:n + 2, 1:n + 1, faces.BOTTOM_COMPONENT]
  return (right - left) + (up - down)


def max_divergence(state: FluidState) -> jax.Array:
  """Returns the largest absolute cell divergence of the field."""
  return jnp.max(jnp.abs(divergence(state)))
