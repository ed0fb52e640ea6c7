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
"""Physical and numerical parameters of the relaxation solver."""

import dataclasses

from jax.tree_util import register_pytree_node_class


@register_pytree_node_class
@dataclasses.dataclass
class SolverParameters:
  """
  Free-standing, mutable solver configuration.

  Every field is a traced child of the PyTree, so compiled step functions pick
  up new values on the next call without recompiling. Changes only affect
  subsequent steps. No field is validated here; the solver tolerates any
  combination the caller supplies.

  Attributes:
    grid_spacing: Cell size used to scale the diagnostic pressure.
    density: Fluid density used to scale the diagnostic pressure.
    over_relaxation: Multiplier on the divergence, conventionally in `[0, 2]`.
    gravity: Gravitational acceleration subtracted from open faces.
    substeps: Number of relaxation passes per tick.
  """
  grid_spacing: float = 1.0
  density: float = 1000.0
  over_relaxation: float = 1.0
  gravity: float = 9.81
  substeps: int = 3

  def tree_flatten(self):
    """All parameters are dynamic children; there is no static data."""
    children = (self.grid_spacing, self.density, self.over_relaxation,
                self.gravity, self.substeps)
    aux_data = None
    return children, aux_data

  @classmethod
  def tree_unflatten(cls, aux_data, children):
    """Defines how to reconstruct the object from its flattened parts."""
    return cls(*children)
