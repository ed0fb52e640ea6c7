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
"""Tests for jax_mac.base.time_stepping."""
import logging

import numpy as np
import pytest

from jax_mac.base import faces
from jax_mac.base import finite_differences as fd
from jax_mac.base import grids
from jax_mac.base import initial_conditions
from jax_mac.base import parameters
from jax_mac.base import pressure
from jax_mac.base import time_stepping


def test_substeps_repeat_the_full_time_step():
  state = initial_conditions.disc(grids.allocate(6))
  params = parameters.SolverParameters(gravity=9.81)

  ticked = time_stepping.tick(state, params, 0.1, substeps=3)

  expected = state
  for _ in range(3):
    expected = pressure.relaxation_step(expected, params, 0.1)
  np.testing.assert_allclose(
      ticked.velocities, expected.velocities, rtol=1e-5, atol=1e-5)
  np.testing.assert_allclose(
      ticked.pressure, expected.pressure, rtol=1e-5, atol=1e-2)


def test_substeps_default_to_params():
  state = initial_conditions.disc(grids.allocate(4))
  params = parameters.SolverParameters(substeps=2)
  ticked = time_stepping.tick(state, params, 0.5)
  expected = time_stepping.tick(state, params, 0.5, substeps=2)
  np.testing.assert_allclose(ticked.velocities, expected.velocities)


def test_tick_rejects_zero_dt():
  state = grids.allocate(3)
  with pytest.raises(ValueError):
    time_stepping.tick(state, parameters.SolverParameters(), 0.)


@pytest.mark.parametrize('substeps', [0, -2])
def test_tick_rejects_non_positive_substeps(substeps):
  state = grids.allocate(3)
  with pytest.raises(ValueError):
    time_stepping.tick(state, parameters.SolverParameters(), 1., substeps)


def test_repeated_substeps_converge_toward_zero_divergence():
  state = initial_conditions.disc(grids.allocate(8))
  params = parameters.SolverParameters(gravity=0.)
  initial = np.linalg.norm(fd.divergence(state))
  assert initial > 0.

  relaxed = time_stepping.tick(state, params, 1., substeps=30)

  assert np.linalg.norm(fd.divergence(relaxed)) < 0.5 * initial


def test_solver_reset_clears_history():
  solver = time_stepping.Solver(resolution=5)
  solver.seed_disc()
  solver.tick(0.1)
  assert np.any(solver.read_diagnostics() != 0.)

  solver.reset()

  diagnostics = solver.read_diagnostics()
  assert diagnostics.shape == (25,)
  np.testing.assert_array_equal(diagnostics, 0.)
  np.testing.assert_array_equal(solver.state.velocities, 0.)
  assert solver.state.grid == grids.Grid(5)


def test_solver_parameters_take_effect_on_next_tick():
  solver = time_stepping.Solver(resolution=3)
  solver.params.over_relaxation = 0.
  solver.params.gravity = 1.
  solver.tick(1., substeps=1)
  np.testing.assert_allclose(
      solver.get_velocity(0, 0, faces.Direction.LEFT), -1., rtol=1e-6)

  solver.params.gravity = 2.
  solver.tick(1., substeps=1)
  np.testing.assert_allclose(
      solver.get_velocity(0, 0, faces.Direction.LEFT), -3., rtol=1e-6)


def test_solver_step_runs_one_pass():
  solver = time_stepping.Solver(
      resolution=4, params=parameters.SolverParameters(substeps=5))
  solver.seed_disc()
  start = solver.state
  solver.step(0.2)
  expected = pressure.relaxation_step(start, solver.params, 0.2)
  np.testing.assert_allclose(
      solver.state.velocities, expected.velocities, rtol=1e-6, atol=1e-6)
  with pytest.raises(ValueError):
    solver.step(0.)


def test_solver_velocity_access():
  solver = time_stepping.Solver(resolution=3)
  solver.set_velocity(1, 1, faces.Direction.RIGHT, 2.)
  assert solver.get_velocity(2, 1, faces.Direction.LEFT) == 2.


def test_solver_logs_ticks(caplog):
  solver = time_stepping.Solver(resolution=3)
  with caplog.at_level(logging.DEBUG, logger='jax_mac.base.time_stepping'):
    solver.tick(0.1, substeps=1)
  assert any('max |div|' in record.getMessage() for record in caplog.records)
