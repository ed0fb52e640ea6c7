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
Local relaxation pressure projection on the MAC grid.

In an incompressible fluid the velocity field `v` must be divergence-free
(`∇ ⋅ v = 0`): the net flow into any cell equals the net flow out. Instead of
solving a global Poisson equation for pressure, this module drives the field
toward zero divergence with a Gauss-Seidel sweep over the cells. For every cell
`(x, y)`, visited in a fixed order (x outer, y inner):

1.  **Gravity**: every open face receives one explicit Euler step,
    `v += gravity * dt * -1`. Gravity is subtracted from all four open faces,
    horizontal ones included.
2.  **Weight**: the number of open faces. A cell with no open face is skipped
    entirely: no correction and no diagnostic write.
3.  **Divergence**: `over_relaxation * ((right - left) + (up - down))`, read
    after the gravity update.
4.  **Correction**: each open face moves by `push * sign * -1` with
    `push = divergence / weight`, where `sign` is `+1` for UP and RIGHT and
    `-1` for DOWN and LEFT. With `over_relaxation == 1` this zeroes the cell's
    divergence.
5.  **Diagnostic**: `push * density * grid_spacing / dt` is written to the
    cell's entry of the pressure grid. It is never read back.

Faces are shared between neighbors and updated in place, so each correction
disturbs the neighbors' divergence and later cells see it within the same
sweep. Many sweeps are needed for convergence; the substep count of the driver
is the main knob for quality versus cost. There is no advection step.

`dt` must be non-zero. The host-side drivers in `time_stepping` reject a zero
`dt` before any compiled code runs.
"""
import dataclasses
import functools

import jax
import jax.numpy as jnp

from jax_mac.base import boundaries
from jax_mac.base import faces
from jax_mac.base import grids
from jax_mac.base import parameters

# --- Type Aliases ---
FluidState = grids.FluidState
IntOrArray = grids.IntOrArray
ObstacleFn = boundaries.ObstacleFn
SolverParameters = parameters.SolverParameters

# Weights below this are treated as zero.
_MIN_WEIGHT = 0.01


def relax_cell(
    state: FluidState,
    params: SolverParameters,
    dt: float,
    x: IntOrArray,
    y: IntOrArray,
    obstacle_fn: ObstacleFn = boundaries.is_obstacle,
) -> FluidState:
  """
  Applies gravity and the divergence correction to the faces of one cell.

  Args:
    state: The current simulation state.
    params: The solver parameters.
    dt: The time step. Must be non-zero.
    x: Column of the cell. May be a traced scalar.
    y: Row of the cell. May be a traced scalar.
    obstacle_fn: Classifier deciding which faces are solid.

  Returns:
    A new `FluidState` with the four faces of `(x, y)` updated and, unless the
    cell has no open face, its diagnostic pressure written.
  """
  grid = state.grid
  indices = [faces.face_index(grid, x, y, d) for d in faces.DIRECTIONS]
  is_open = [jnp.logical_not(obstacle_fn(grid, x, y, d))
             for d in faces.DIRECTIONS]

  # Explicit Euler gravity, applied to horizontal faces as well.
  velocities = state.velocities
  for index, open_face in zip(indices, is_open):
    v = velocities[index]
    velocities = velocities.at[index].set(
        jnp.where(open_face, v + params.gravity * dt * -1., v))

  weight = sum(open_face.astype(velocities.dtype) for open_face in is_open)

  def skip(velocities):
    return velocities, state.pressure

  def correct(velocities):
    face = {d: velocities[i] for d, i in zip(faces.DIRECTIONS, indices)}
    divergence = params.over_relaxation * (
        face[faces.Direction.RIGHT] - face[faces.Direction.LEFT])
    divergence += params.over_relaxation * (
        face[faces.Direction.UP] - face[faces.Direction.DOWN])

    # > 0: too much outflow, < 0: too much inflow.
    push = divergence / weight
    for direction, index, open_face in zip(faces.DIRECTIONS, indices, is_open):
      v = velocities[index]
      velocities = velocities.at[index].set(jnp.where(
          open_face, v + push * faces.direction_sign(direction) * -1., v))

    pressure = state.pressure.at[y, x].set(
        push * (params.density * params.grid_spacing / dt))
    return velocities, pressure

  velocities, pressure = jax.lax.cond(
      weight < _MIN_WEIGHT, skip, correct, velocities)
  return dataclasses.replace(state, velocities=velocities, pressure=pressure)


@functools.partial(jax.jit, static_argnames=('obstacle_fn',))
def relaxation_step(
    state: FluidState,
    params: SolverParameters,
    dt: float,
    obstacle_fn: ObstacleFn = boundaries.is_obstacle,
) -> FluidState:
  """
  Runs one Gauss-Seidel sweep of `relax_cell` over every simulated cell.

  Cells are visited column by column: `x` is the outer index and `y` the inner
  one. The order is fixed, so a sweep is reproducible.

  Args:
    state: The current simulation state.
    params: The solver parameters.
    dt: The time step. Must be non-zero.
    obstacle_fn: Classifier deciding which faces are solid. It is a static
      argument; passing a new function triggers a recompilation.

  Returns:
    The state after one relaxation pass.
  """
  n = state.resolution

  def body(k, state):
    x, y = k // n, k % n
    return relax_cell(state, params, dt, x, y, obstacle_fn)

  return jax.lax.fori_loop(0, n * n, body, state)
