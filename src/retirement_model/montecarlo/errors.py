# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""Exceptions raised by the simulation engine."""


class SimulationInputError(ValueError):
    """Simulation parameters are malformed; the run is rejected before it starts."""
