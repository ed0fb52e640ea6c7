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
Functions and the `Solver` handle for advancing the simulation in time.

A tick runs `substeps` relaxation passes, each with the full tick `dt`. The
time step is not divided by the substep count: more substeps buy more
correction iterations, not finer time integration.

Two layers are provided:

1.  **`tick`**: a pure function `(state, params, dt, substeps) -> state`. It
    validates its arguments on the host and then runs a compiled loop over
    `pressure.relaxation_step`.
2.  **`Solver`**: an owned handle holding the current `FluidState` and the
    mutable `SolverParameters`. It exposes reset, tick and read-out to the
    application that drives the simulation. Calls must be serialized by the
    caller; nothing here locks.
"""
import functools
import logging
import operator
from typing import Optional

import jax
import numpy as np

from jax_mac.base import boundaries
from jax_mac.base import faces
from jax_mac.base import finite_differences as fd
from jax_mac.base import grids
from jax_mac.base import initial_conditions
from jax_mac.base import parameters
from jax_mac.base import pressure

logger = logging.getLogger(__name__)

FluidState = grids.FluidState
ObstacleFn = boundaries.ObstacleFn
SolverParameters = parameters.SolverParameters


def _check_time_step(dt: float):
  if dt == 0:
    raise ValueError('dt must be non-zero: the diagnostic pressure divides by it')


@functools.partial(jax.jit, static_argnames=('obstacle_fn',))
def _relax_repeatedly(
    state: FluidState,
    params: SolverParameters,
    dt: float,
    substeps: int,
    obstacle_fn: ObstacleFn,
) -> FluidState:
  def body(_, state):
    return pressure.relaxation_step(state, params, dt, obstacle_fn=obstacle_fn)
  return jax.lax.fori_loop(0, substeps, body, state)


def tick(
    state: FluidState,
    params: SolverParameters,
    dt: float,
    substeps: Optional[int] = None,
    obstacle_fn: ObstacleFn = boundaries.is_obstacle,
) -> FluidState:
  """
  Advances the state by one tick of `substeps` relaxation passes.

  Args:
    state: The current simulation state.
    params: The solver parameters.
    dt: The tick's time step, used unchanged by every substep. Must be non-zero.
    substeps: Number of relaxation passes. Defaults to `params.substeps`.
    obstacle_fn: Classifier deciding which faces are solid.

  Returns:
    The state after the tick.

  Raises:
    ValueError: if `dt` is zero or `substeps` is less than one.
  """
  if substeps is None:
    substeps = params.substeps
  substeps = operator.index(substeps)
  _check_time_step(dt)
  if substeps < 1:
    raise ValueError(f'substeps must be at least 1, got {substeps}')
  return _relax_repeatedly(state, params, dt, substeps, obstacle_fn=obstacle_fn)


class Solver:
  """
  Owns one simulation: its state, its parameters and its obstacle classifier.

  Attributes:
    params: The `SolverParameters`. Fields may be changed at any time and take
      effect on the next tick.
    obstacle_fn: The face classifier handed to every relaxation pass.
    state: The current `FluidState`. Replaced by every mutating call.
  """

  def __init__(
      self,
      resolution: int = grids.DEFAULT_RESOLUTION,
      params: Optional[SolverParameters] = None,
      obstacle_fn: ObstacleFn = boundaries.is_obstacle,
  ):
    self.params = params if params is not None else SolverParameters()
    self.obstacle_fn = obstacle_fn
    self.state = grids.allocate(resolution)
    logger.info('created %dx%d relaxation solver: %s',
                resolution, resolution, self.params)

  @property
  def grid(self) -> grids.Grid:
    return self.state.grid

  @property
  def resolution(self) -> int:
    return self.state.resolution

  def reset(self):
    """Zero-fills the velocity and diagnostic grids."""
    self.state = grids.reset(self.state)
    logger.info('reset %dx%d solver', self.resolution, self.resolution)

  def tick(self, dt: float, substeps: Optional[int] = None):
    """Runs `substeps` (default `params.substeps`) relaxation passes with `dt`."""
    if substeps is None:
      substeps = self.params.substeps
    self.state = tick(self.state, self.params, dt, substeps, self.obstacle_fn)
    if logger.isEnabledFor(logging.DEBUG):
      logger.debug('tick dt=%g substeps=%d max |div|=%g',
                   dt, substeps, float(fd.max_divergence(self.state)))

  def step(self, dt: float):
    """Runs exactly one relaxation pass, regardless of `params.substeps`."""
    _check_time_step(dt)
    self.state = pressure.relaxation_step(
        self.state, self.params, dt, obstacle_fn=self.obstacle_fn)

  def read_diagnostics(self) -> np.ndarray:
    """Returns a row-major host copy of the `N x N` diagnostic grid."""
    return grids.read_diagnostics(self.state)

  def get_velocity(self, x: int, y: int, direction: faces.Direction) -> float:
    return float(faces.get_velocity(self.state, x, y, direction))

  def set_velocity(self, x: int, y: int, direction: faces.Direction, value: float):
    self.state = faces.set_velocity(self.state, x, y, direction, value)

  def seed_disc(self, radius: float = 0.7, speed: float = 10.0):
    """Replaces the velocity field with `initial_conditions.disc`."""
    self.state = initial_conditions.disc(self.state, radius, speed)
