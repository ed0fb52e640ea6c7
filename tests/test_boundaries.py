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
"""Tests for jax_mac.base.boundaries."""
import itertools

import pytest

from jax_mac.base import boundaries
from jax_mac.base import faces
from jax_mac.base import grids

N = 4


@pytest.mark.parametrize('direction', faces.DIRECTIONS)
def test_cells_inside_the_domain_are_never_obstacles(direction):
  grid = grids.Grid(N)
  for x, y in itertools.product(range(N), range(N)):
    # Edge cells included: the neighbor across the face is not inspected.
    assert not bool(boundaries.is_obstacle(grid, x, y, direction))


@pytest.mark.parametrize('direction', faces.DIRECTIONS)
@pytest.mark.parametrize('x,y', [(-1, 0), (N, 2), (1, -1), (3, N), (-1, N)])
def test_cells_outside_the_domain_are_obstacles(direction, x, y):
  grid = grids.Grid(N)
  assert bool(boundaries.is_obstacle(grid, x, y, direction))


def test_open_faces():
  grid = grids.Grid(N)
  assert boundaries.open_faces(grid, 0, 0).tolist() == [True] * 4
  assert boundaries.open_faces(grid, N, 0).tolist() == [False] * 4
