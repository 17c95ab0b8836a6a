# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Message boundary between a host and the simulation engine.

A request is a plain mapping `{"params": ..., "iterations": 5000, "seed": None}`,
optionally with a `start_year` that pins the calendar year of simulated year 0;
the response is either `{"success": True, "result": {...}}` or
`{"success": False, "error": "..."}`. Runs execute on a dedicated background
thread so the host stays responsive; a host that stops waiting simply
abandons the future.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Dict, Mapping, Optional, Tuple

from .config import MonteCarloConfig
from .errors import SimulationInputError
from .market_assumptions import MarketAssumptions
from .params import SimulationParams
from .simulator import MonteCarloSimulator

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 5000


def parse_request(message: Mapping[str, Any],
                  max_iterations: Optional[int] = None) -> Tuple[SimulationParams, MonteCarloConfig]:
    """Validate a request message.

    Args:
        message: Request mapping with `params`, optional `iterations` and `seed`
        max_iterations: Upper bound on `iterations`, if any

    Returns:
        Parsed parameters and the run configuration

    Raises:
        SimulationInputError: If the message is malformed
    """
    if not isinstance(message, Mapping):
        raise SimulationInputError("Request must be an object")

    params = message.get('params')
    if isinstance(params, SimulationParams):
        parsed = params
    elif params is None:
        raise SimulationInputError("Request is missing 'params'")
    else:
        parsed = SimulationParams.from_dict(params)

    iterations = message.get('iterations')
    if iterations is None:
        iterations = DEFAULT_ITERATIONS
    if max_iterations is not None and isinstance(iterations, int) and iterations > max_iterations:
        raise SimulationInputError(
            f"iterations ({iterations}) exceeds the maximum of {max_iterations}"
        )

    seed = message.get('seed')
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        raise SimulationInputError(f"seed must be an integer, got {seed!r}")

    config = MonteCarloConfig(num_simulations=iterations, random_seed=seed)
    start_year = message.get('start_year', message.get('startYear'))
    if start_year is not None:
        if isinstance(start_year, bool) or not isinstance(start_year, int):
            raise SimulationInputError(f"start_year must be an integer, got {start_year!r}")
        config.start_year = start_year
    return parsed, config


def handle_request(message: Mapping[str, Any],
                   market_assumptions: Optional[MarketAssumptions] = None,
                   max_iterations: Optional[int] = None) -> Dict[str, Any]:
    """Run one simulation request and wrap the outcome in a response envelope.

    Never raises: every failure is reported as `{"success": False, "error": ...}`.
    """
    try:
        params, config = parse_request(message, max_iterations)
        results = MonteCarloSimulator(market_assumptions, config).run(params)
        return {'success': True, 'result': results.to_dict()}
    except SimulationInputError as exc:
        logger.warning("Rejected simulation request: %s", exc)
        return {'success': False, 'error': str(exc)}
    except Exception as exc:
        logger.exception("Simulation run failed")
        return {'success': False, 'error': str(exc) or type(exc).__name__}


class SimulationWorker:
    """Runs simulation requests on a dedicated background thread.

    Example:
        >>> worker = SimulationWorker()
        >>> response = worker.submit({"params": params, "iterations": 1000}).result()
        >>> worker.shutdown()
    """

    def __init__(self,
                 market_assumptions: Optional[MarketAssumptions] = None,
                 max_iterations: Optional[int] = None):
        self.market = market_assumptions or MarketAssumptions.create_default()
        self.max_iterations = max_iterations
        self._executor = ThreadPoolExecutor(max_workers=1,
                                            thread_name_prefix='retirement-simulation')

    def submit(self, message: Mapping[str, Any]) -> 'Future[Dict[str, Any]]':
        """Queue a request; the future resolves to the response envelope."""
        return self._executor.submit(handle_request, message, self.market, self.max_iterations)

    def shutdown(self, wait: bool = False):
        """Stop accepting work and drop anything still queued."""
        self._executor.shutdown(wait=wait, cancel_futures=True)

    def __enter__(self) -> 'SimulationWorker':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.shutdown()
