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
This `__init__.py` file makes the `jax_mac.base` directory a Python package.

By importing the modules here, users can write `from jax_mac.base import grids`
or simply `import jax_mac` and reach every module as an attribute.
"""

# --- Storage and addressing ---

# The padded velocity buffer, the diagnostic grid and their `Grid` metadata.
import jax_mac.base.grids

# The Direction -> (offset, component) table that maps cell faces to storage.
import jax_mac.base.faces

# Decides which faces are solid domain boundaries.
import jax_mac.base.boundaries

# --- Solver ---

# The mutable physical and numerical parameters.
import jax_mac.base.parameters

# The Gauss-Seidel relaxation sweep (gravity, divergence correction, pressure read-out).
import jax_mac.base.pressure

# The substep loop and the `Solver` handle.
import jax_mac.base.time_stepping

# --- Utilities ---

# Vectorized residual divergence for monitoring convergence.
import jax_mac.base.finite_differences

# Initial velocity fields.
import jax_mac.base.initial_conditions
