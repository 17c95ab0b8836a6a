from __future__ import annotations

import logging
import os
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Tuple

from flask import Flask, jsonify, request

from retirement_model.montecarlo.errors import SimulationInputError
from retirement_model.montecarlo.worker import SimulationWorker, parse_request


logger = logging.getLogger(__name__)

SIMULATION_TIMEOUT_SECONDS = float(os.getenv("SIMULATION_TIMEOUT_SECONDS", "120"))
MAX_SIMULATION_ITERATIONS = int(os.getenv("MAX_SIMULATION_ITERATIONS", "50000"))

app = Flask(__name__)
worker = SimulationWorker(max_iterations=MAX_SIMULATION_ITERATIONS)


@app.get("/health")
def health() -> Tuple[Any, int]:
    return jsonify({"ok": True, "service": "retirement-model-api"}), 200


@app.post("/retirement/api/v1/simulate")
def simulate() -> Tuple[Any, int]:
    payload = request.get_json(silent=True)
    if payload is None:
        return jsonify({"success": False, "error": "Request JSON body is required"}), 400
    if not isinstance(payload, dict):
        return jsonify({"success": False, "error": "Request JSON body must be an object"}), 400

    try:
        parse_request(payload, MAX_SIMULATION_ITERATIONS)
    except SimulationInputError as exc:
        return jsonify({"success": False, "error": str(exc)}), 400

    future = worker.submit(payload)
    try:
        response = future.result(timeout=SIMULATION_TIMEOUT_SECONDS)
    except FutureTimeoutError:
        future.cancel()
        logger.warning("Simulation abandoned after %.0f seconds", SIMULATION_TIMEOUT_SECONDS)
        return jsonify({"success": False, "error": "Simulation timed out"}), 504

    return jsonify(response), 200 if response["success"] else 500


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    port = int(os.getenv("PORT", "8002"))
    app.run(host="0.0.0.0", port=port, debug=False)
