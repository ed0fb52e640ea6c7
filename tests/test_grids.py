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
"""Tests for jax_mac.base.grids."""
import jax
import numpy as np
import pytest

from jax_mac.base import faces
from jax_mac.base import grids


def test_allocate_shapes_and_zeros():
  state = grids.allocate(5)
  assert state.grid.resolution == 5
  assert state.grid.padded_resolution == 7
  assert state.velocities.shape == (2 * 7 * 7,)
  assert state.pressure.shape == (5, 5)
  assert state.cells().shape == (7, 7, 2)
  np.testing.assert_array_equal(state.velocities, 0.)
  np.testing.assert_array_equal(state.pressure, 0.)


@pytest.mark.parametrize('resolution', [0, -3])
def test_allocate_rejects_non_positive_resolution(resolution):
  with pytest.raises(ValueError):
    grids.allocate(resolution)


def test_padded_index_shifts_by_one():
  grid = grids.Grid(4)
  assert grid.padded_index(-1, -1) == 0
  assert grid.padded_index(0, 0) == 6 + 1
  assert grid.padded_index(3, 2) == 3 * 6 + 4
  assert grid.diagnostic_index(3, 2) == 2 * 4 + 3


def test_grid_is_hashable_metadata():
  assert grids.Grid(3) == grids.Grid(3)
  assert hash(grids.Grid(3)) == hash(grids.Grid(3))
  assert grids.Grid(3) != grids.Grid(4)


def test_fluid_state_is_a_pytree():
  state = grids.allocate(3)
  leaves, treedef = jax.tree_util.tree_flatten(state)
  assert len(leaves) == 2
  rebuilt = jax.tree_util.tree_unflatten(treedef, leaves)
  assert rebuilt.grid == state.grid


def test_reset_zero_fills_both_buffers():
  state = grids.allocate(4)
  state = faces.set_velocity(state, 1, 2, faces.Direction.UP, 3.5)
  state = grids.FluidState(state.velocities, state.pressure + 2., state.grid)
  state = grids.reset(state)
  np.testing.assert_array_equal(state.velocities, 0.)
  diagnostics = grids.read_diagnostics(state)
  assert diagnostics.shape == (16,)
  np.testing.assert_array_equal(diagnostics, 0.)


def test_read_diagnostics_is_row_major_snapshot():
  state = grids.allocate(3)
  pressure = np.zeros((3, 3), dtype=np.float32)
  pressure[1, 2] = 4.  # y=1, x=2
  state = grids.FluidState(state.velocities, pressure, state.grid)
  diagnostics = grids.read_diagnostics(state)
  assert diagnostics[state.grid.diagnostic_index(2, 1)] == 4.
  diagnostics[:] = -1.
  assert grids.read_diagnostics(state)[5] == 4.
