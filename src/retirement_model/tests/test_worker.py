# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Tests for the request/response boundary and the background worker.
"""

import threading
import unittest
from unittest.mock import patch

from ..montecarlo.errors import SimulationInputError
from ..montecarlo.simulator import MonteCarloSimulator
from ..montecarlo.worker import SimulationWorker, handle_request, parse_request

PARAMS = {
    'current_age': 55,
    'retirement_age': 65,
    'current_savings': 500000,
    'annual_contribution': 10000,
    'monthly_retirement_spending': 4000,
    'allocation': {'stocks': 50, 'bonds': 40, 'cash': 10},
}


class TestParseRequest(unittest.TestCase):
    """Tests for parse_request."""

    def test_default_iterations(self):
        _, config = parse_request({'params': PARAMS})
        self.assertEqual(config.num_simulations, 5000)
        self.assertIsNone(config.random_seed)

    def test_iterations_and_seed(self):
        _, config = parse_request({'params': PARAMS, 'iterations': 250, 'seed': 9})
        self.assertEqual(config.num_simulations, 250)
        self.assertEqual(config.random_seed, 9)

    def test_start_year_pinned(self):
        _, config = parse_request({'params': PARAMS, 'start_year': 2030})
        self.assertEqual(config.start_year, 2030)
        _, config = parse_request({'params': PARAMS, 'startYear': 2031})
        self.assertEqual(config.start_year, 2031)

    def test_pinned_start_year_reproduces_premiums(self):
        params = dict(PARAMS, current_age=64, medicare={'pension_income': 150000})
        message = {'params': params, 'iterations': 50, 'seed': 4, 'start_year': 2026}
        first = handle_request(message)['result']
        second = handle_request(message)['result']
        later = handle_request(dict(message, start_year=2036))['result']
        self.assertEqual(first['premium_costs'], second['premium_costs'])
        self.assertNotEqual(first['premium_costs'], later['premium_costs'])

    def test_rejects_bad_messages(self):
        bad_messages = [
            None,
            {},
            {'params': PARAMS, 'iterations': 0},
            {'params': PARAMS, 'iterations': -5},
            {'params': PARAMS, 'iterations': 'many'},
            {'params': PARAMS, 'seed': 'abc'},
            {'params': PARAMS, 'start_year': '2026'},
            {'params': dict(PARAMS, retirement_age=50)},
        ]
        for message in bad_messages:
            with self.subTest(message=message):
                with self.assertRaises(SimulationInputError):
                    parse_request(message)

    def test_iteration_ceiling(self):
        with self.assertRaises(SimulationInputError):
            parse_request({'params': PARAMS, 'iterations': 1001}, max_iterations=1000)


class TestHandleRequest(unittest.TestCase):
    """Tests for handle_request."""

    def test_success_envelope(self):
        response = handle_request({'params': PARAMS, 'iterations': 200, 'seed': 1})
        self.assertTrue(response['success'])
        result = response['result']
        self.assertEqual(result['num_simulations'], 200)
        self.assertEqual(set(result['percentiles']), {'p5', 'p25', 'p50', 'p75', 'p95'})
        self.assertTrue(0 <= result['success_rate'] <= 100)

    def test_input_error_envelope(self):
        response = handle_request({'params': PARAMS, 'iterations': 0})
        self.assertEqual(response['success'], False)
        self.assertIn('num_simulations', response['error'])
        self.assertNotIn('result', response)

    def test_runtime_fault_is_contained(self):
        with patch.object(MonteCarloSimulator, 'run', side_effect=MemoryError()):
            with self.assertLogs('retirement_model.montecarlo.worker', level='ERROR'):
                response = handle_request({'params': PARAMS, 'iterations': 10})
        self.assertEqual(response, {'success': False, 'error': 'MemoryError'})

    def test_runtime_fault_message(self):
        with patch.object(MonteCarloSimulator, 'run', side_effect=RuntimeError('boom')):
            with self.assertLogs('retirement_model.montecarlo.worker', level='ERROR'):
                response = handle_request({'params': PARAMS, 'iterations': 10})
        self.assertEqual(response['error'], 'boom')


class TestSimulationWorker(unittest.TestCase):
    """Tests for SimulationWorker."""

    def test_submit_returns_future(self):
        with SimulationWorker() as worker:
            future = worker.submit({'params': PARAMS, 'iterations': 100, 'seed': 3})
            response = future.result(timeout=60)
        self.assertTrue(response['success'])

    def test_runs_off_the_calling_thread(self):
        seen = []

        def record(*args, **kwargs):
            seen.append(threading.current_thread().name)
            return {'success': True, 'result': {}}

        with patch('retirement_model.montecarlo.worker.handle_request', side_effect=record):
            with SimulationWorker() as worker:
                worker.submit({'params': PARAMS}).result(timeout=60)
        self.assertTrue(seen[0].startswith('retirement-simulation'))

    def test_max_iterations_enforced(self):
        with SimulationWorker(max_iterations=50) as worker:
            response = worker.submit({'params': PARAMS, 'iterations': 100}).result(timeout=60)
        self.assertFalse(response['success'])


if __name__ == '__main__':
    unittest.main()
