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
`jax_mac` is a staggered-grid (MAC grid) incompressible-flow velocity solver
written in JAX.

The solver advances a 2D velocity field under gravity and drives it toward
zero divergence with an iterative local-relaxation (Gauss-Seidel) projection.
Each cell stores only its right-face and bottom-face velocity; the other two
faces are read through the neighboring cells, so every interior face is held
exactly once.

Typical use:

  from jax_mac.base import time_stepping

  solver = time_stepping.Solver(resolution=128)
  solver.seed_disc()
  solver.tick(dt=1 / 60)
  pressure = solver.read_diagnostics()
"""

# The `base` subpackage holds the grid storage, face addressing, boundary
# classification, the relaxation sweep and the driver.
import jax_mac.base
