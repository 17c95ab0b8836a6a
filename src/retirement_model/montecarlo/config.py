# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""Configuration for Monte Carlo simulations."""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from .errors import SimulationInputError


@dataclass
class MonteCarloConfig:
    """Configuration for Monte Carlo simulation parameters.

    Attributes:
        num_simulations: Number of Monte Carlo trials to run. Default 5000.
        random_seed: Optional seed for reproducible results. Default None.
        retirement_years: Years simulated past the retirement age. Default 35.
        start_year: Calendar year of simulated year 0. Default current year.
            Medicare premiums are inflated from this year, so a seeded run
            that charges premiums only reproduces when start_year is pinned.
    """
    num_simulations: int = 5000
    random_seed: Optional[int] = None
    retirement_years: int = 35
    start_year: int = field(default_factory=lambda: date.today().year)

    def __post_init__(self):
        if isinstance(self.num_simulations, bool) or not isinstance(self.num_simulations, int):
            raise SimulationInputError(
                f"num_simulations must be an integer, got {self.num_simulations!r}"
            )
        if self.num_simulations < 1:
            raise SimulationInputError("num_simulations must be at least 1")
        if self.retirement_years < 1:
            raise SimulationInputError("retirement_years must be at least 1")
