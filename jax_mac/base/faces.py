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
Addressing of face velocities on the padded MAC grid.

Each cell stores only its right-face and bottom-face velocity. The four faces
of a cell are reached through a fixed table mapping a `Direction` to a cell
offset and a stored component:

  RIGHT -> ( 0,  0, right)   the cell's own right face
  DOWN  -> ( 0,  0, bottom)  the cell's own bottom face
  LEFT  -> (-1,  0, right)   the right face of the cell to the left
  UP    -> ( 0, +1, bottom)  the bottom face of the cell above

With this table two cells sharing an edge resolve that edge, each in its own
local terms, to the same entry of the flat velocity buffer. That entry index,
returned by `face_index`, plays the role of a mutable reference: writes go
through `FluidState.velocities.at[index]`.
"""
import dataclasses
import enum
from typing import Tuple

import jax

from jax_mac.base import grids

# --- Type Aliases ---
FluidState = grids.FluidState
IntOrArray = grids.IntOrArray

# Stored components of a cell, see `grids.FluidState.velocities`.
RIGHT_COMPONENT = 0
BOTTOM_COMPONENT = 1


class Direction(enum.IntEnum):
  """The four faces of a cell."""
  UP = 0
  DOWN = 1
  LEFT = 2
  RIGHT = 3


# Iteration order used by the relaxation sweep.
DIRECTIONS = (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)

# Direction -> (dx, dy, component) of the cell that stores the face.
_FACE_REFERENCES = {
    Direction.UP: (0, 1, BOTTOM_COMPONENT),
    Direction.DOWN: (0, 0, BOTTOM_COMPONENT),
    Direction.LEFT: (-1, 0, RIGHT_COMPONENT),
    Direction.RIGHT: (0, 0, RIGHT_COMPONENT),
}

# UP and RIGHT are positive, DOWN and LEFT negative.
_DIRECTION_SIGNS = {
    Direction.UP: 1.0,
    Direction.DOWN: -1.0,
    Direction.LEFT: -1.0,
    Direction.RIGHT: 1.0,
}

# Direction -> (dx, dy) of the neighboring cell across that face.
NEIGHBOR_OFFSETS = {
    Direction.UP: (0, 1),
    Direction.DOWN: (0, -1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}


def _checked(direction: Direction) -> Direction:
  # Direction is a closed set; anything else is a programming error.
  if direction not in _FACE_REFERENCES:
    raise AssertionError(f'unreachable face direction: {direction!r}')
  return Direction(direction)


def face_reference(direction: Direction) -> Tuple[int, int, int]:
  """Returns the `(dx, dy, component)` entry of the addressing table."""
  return _FACE_REFERENCES[_checked(direction)]


def direction_sign(direction: Direction) -> float:
  """Returns `+1.0` for UP and RIGHT and `-1.0` for DOWN and LEFT."""
  return _DIRECTION_SIGNS[_checked(direction)]


def opposite(direction: Direction) -> Direction:
  """Returns the direction pointing back across the same face."""
  return _OPPOSITES[_checked(direction)]


def neighbor(x: int, y: int, direction: Direction) -> Tuple[int, int]:
  """Returns the coordinates of the cell across the `direction` face of `(x, y)`."""
  dx, dy = NEIGHBOR_OFFSETS[_checked(direction)]
  return x + dx, y + dy


def face_index(
    grid: grids.Grid,
    x: IntOrArray,
    y: IntOrArray,
    direction: Direction,
) -> IntOrArray:
  """
  Returns the index in the flat velocity buffer of one face of cell `(x, y)`.

  Args:
    grid: The grid the velocity buffer is laid out on.
    x: Logical column in `[0, N)`. May be a traced scalar.
    y: Logical row in `[0, N)`. May be a traced scalar.
    direction: Which face of the cell to address. Must be a static value.

  Returns:
    The flat buffer index of the single scalar representing that face.

  Raises:
    AssertionError: if `direction` is not one of the four `Direction` values.
  """
  dx, dy, component = face_reference(direction)
  cell = grid.padded_index(x + dx, y + dy)
  return grids.COMPONENTS_PER_CELL * cell + component


def get_velocity(
    state: FluidState,
    x: IntOrArray,
    y: IntOrArray,
    direction: Direction,
) -> jax.Array:
  """Returns, by value, the velocity on the `direction` face of cell `(x, y)`."""
  return state.velocities[face_index(state.grid, x, y, direction)]


def set_velocity(
    state: FluidState,
    x: IntOrArray,
    y: IntOrArray,
    direction: Direction,
    value,
) -> FluidState:
  """Returns a new state with the `direction` face of `(x, y)` set to `value`."""
  index = face_index(state.grid, x, y, direction)
  return dataclasses.replace(
      state, velocities=state.velocities.at[index].set(value))


def add_velocity(
    state: FluidState,
    x: IntOrArray,
    y: IntOrArray,
    direction: Direction,
    amount,
) -> FluidState:
  """Returns a new state with `amount` added to the `direction` face of `(x, y)`."""
  index = face_index(state.grid, x, y, direction)
  return dataclasses.replace(
      state, velocities=state.velocities.at[index].add(amount))
