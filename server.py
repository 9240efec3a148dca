"""
EvoForage Server  –  Flask + Server-Sent Events
===============================================

Drives one simulation in a background thread and streams world frames
to a browser, which draws animals as triangles and food as dots.

Endpoints:
  POST /start        Start (or restart) the simulation with JSON config body
  POST /stop         Stop the running simulation
  POST /step         Advance N ticks synchronously (only while stopped)
  GET  /world        Current world frame as JSON
  GET  /stream       SSE stream – browser subscribes here for live data
  GET  /status       Current sim state as JSON

Run:
  python server.py
  # → http://localhost:5000
"""

import threading
import queue
import json
import time

import numpy as np
from flask import Flask, Response, request, jsonify

from simulation import Simulation
from config import (
    NUM_ANIMALS, NUM_FOODS, GENERATION_LENGTH,
    MUTATION_CHANCE, MUTATION_COEFF,
)

# ──────────────────────────────────────────────────────────────────────────────
app = Flask(__name__)

# Global simulation state
_sim:         Simulation | None = None
_rng          = None
_sim_lock     = threading.Lock()          # guards _sim / _rng while stepping
_sim_thread:  threading.Thread | None = None
_stop_event   = threading.Event()
_frame_queue  = queue.Queue(maxsize=200)  # holds dicts to stream
_sim_status   = {
    "running":    False,
    "generation": 0,
    "age":        0,
    "cfg":        {},
}
_status_lock  = threading.Lock()


# ──────────────────────────────────────────────────────────────────────────────
# CORS helper – allow a separately served front end (any origin) to call us
# ──────────────────────────────────────────────────────────────────────────────

@app.after_request
def add_cors(response):
    response.headers["Access-Control-Allow-Origin"]  = "*"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    return response

@app.route("/", methods=["OPTIONS"])
@app.route("/<path:p>", methods=["OPTIONS"])
def preflight(p=""):
    return Response(status=200)


# ──────────────────────────────────────────────────────────────────────────────
# Simulation thread
# ──────────────────────────────────────────────────────────────────────────────

def _build_cfg(data: dict) -> dict:
    """Merge request JSON with defaults."""
    seed = data.get("seed")
    return {
        "seed":              None if seed is None else int(seed),
        "num_animals":       int(data.get("animals",          NUM_ANIMALS)),
        "num_foods":         int(data.get("foods",            NUM_FOODS)),
        "generation_length": int(data.get("generationLength", GENERATION_LENGTH)),
        "mutation_chance":   float(data.get("mutationChance", MUTATION_CHANCE)),
        "mutation_coeff":    float(data.get("mutationCoeff",  MUTATION_COEFF)),
        "use_grid":          bool(data.get("useGrid",         False)),
        "frame_every":       max(1, int(data.get("frameEvery", 1))),
        "tick_delay":        max(0.0, float(data.get("tickDelay", 0.016))),
    }


def _push(out_q: queue.Queue, payload: dict):
    # Non-blocking put; drop oldest frame if queue full
    if out_q.full():
        try:
            out_q.get_nowait()
        except queue.Empty:
            pass
    out_q.put(payload)


def _frame(sim: Simulation) -> dict:
    payload = {"type": "frame", "gen": sim.generation, "age": sim.age}
    payload.update(sim.world.snapshot())
    return payload


def _sim_worker(cfg: dict, stop_evt: threading.Event, out_q: queue.Queue):
    """Step the simulation until stopped; push frames and generation events."""
    with _status_lock:
        _sim_status["running"] = True

    try:
        while not stop_evt.is_set():
            with _sim_lock:
                stats = _sim.step(_rng)
                gen, age = _sim.generation, _sim.age
                frame = _frame(_sim) if age % cfg["frame_every"] == 0 else None

            with _status_lock:
                _sim_status["generation"] = gen
                _sim_status["age"]        = age

            if stats is not None:
                _push(out_q, {
                    "type":       "generation",
                    "gen":        stats["generation"],
                    "minFitness": stats["min_fitness"],
                    "avgFitness": round(stats["avg_fitness"], 3),
                    "maxFitness": stats["max_fitness"],
                    "diversity":  round(stats["diversity"], 4),
                })
            if frame is not None:
                _push(out_q, frame)

            if cfg["tick_delay"]:
                time.sleep(cfg["tick_delay"])
    finally:
        with _status_lock:
            _sim_status["running"] = False
        out_q.put({"type": "done", "gen": _sim_status["generation"]})


# ──────────────────────────────────────────────────────────────────────────────
# Routes
# ──────────────────────────────────────────────────────────────────────────────

@app.route("/start", methods=["POST"])
def start():
    global _sim, _rng, _sim_thread, _stop_event, _frame_queue

    # Stop any running sim
    _stop_event.set()
    if _sim_thread and _sim_thread.is_alive():
        _sim_thread.join(timeout=3)

    cfg = _build_cfg(request.get_json(force=True, silent=True) or {})

    with _sim_lock:
        _rng = np.random.default_rng(cfg["seed"])
        _sim = Simulation.random(
            _rng,
            num_animals       = cfg["num_animals"],
            num_foods         = cfg["num_foods"],
            generation_length = cfg["generation_length"],
            mutation_chance   = cfg["mutation_chance"],
            mutation_coeff    = cfg["mutation_coeff"],
            use_grid          = cfg["use_grid"],
        )

    # Reset
    _stop_event  = threading.Event()
    _frame_queue = queue.Queue(maxsize=200)
    with _status_lock:
        _sim_status["generation"] = 0
        _sim_status["age"]        = 0
        _sim_status["cfg"]        = cfg

    _sim_thread = threading.Thread(
        target=_sim_worker,
        args=(cfg, _stop_event, _frame_queue),
        daemon=True,
    )
    _sim_thread.start()
    return jsonify({"status": "started", "cfg": cfg})


@app.route("/stop", methods=["POST"])
def stop():
    _stop_event.set()
    return jsonify({"status": "stopped"})


@app.route("/step", methods=["POST"])
def step_ticks():
    """Advance a stopped simulation by `ticks` (default 1) and return the frame."""
    if _sim is None:
        return jsonify({"status": "error", "error": "no simulation; POST /start"}), 409
    if _sim_thread and _sim_thread.is_alive():
        return jsonify({"status": "error", "error": "simulation is running"}), 409

    data = request.get_json(force=True, silent=True) or {}
    ticks = max(1, int(data.get("ticks", 1)))
    with _sim_lock:
        for _ in range(ticks):
            _sim.step(_rng)
        frame = _frame(_sim)
    return jsonify(frame)


@app.route("/world", methods=["GET"])
def world():
    if _sim is None:
        return jsonify({"status": "error", "error": "no simulation; POST /start"}), 409
    with _sim_lock:
        return jsonify(_frame(_sim))


@app.route("/status", methods=["GET"])
def status():
    with _status_lock:
        return jsonify(dict(_sim_status))


@app.route("/stream", methods=["GET"])
def stream():
    """SSE endpoint – browser subscribes and receives frames as events."""
    out_q = _frame_queue

    def event_gen():
        # Send a hello so the browser knows it's connected
        yield "data: {\"type\": \"connected\"}\n\n"

        while True:
            try:
                payload = out_q.get(timeout=1)
                yield f"data: {json.dumps(payload)}\n\n"
                if payload.get("type") == "done":
                    break
            except queue.Empty:
                # Keep-alive ping
                yield "data: {\"type\": \"ping\"}\n\n"

    return Response(
        event_gen(),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",    # disable nginx buffering if behind proxy
        },
    )


# ──────────────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    print("=" * 50)
    print("  EvoForage Server  →  http://localhost:5000")
    print("  SSE stream        →  http://localhost:5000/stream")
    print("=" * 50)
    app.run(host="0.0.0.0", port=5000, threaded=True, debug=False)
