# ibonarium/api/app.py
from __future__ import annotations

from flask import Flask, current_app, jsonify, request

from ibonarium.api.decorators import handle_store_closed
from ibonarium.utils.errors import StoreClosedError
from ibonarium.workflows.lab import Lab


def create_app(lab: Lab) -> Flask:
    """
    Read-only status API over a running Lab.

    GET  /health
    GET  /state       current snapshot
    GET  /log         event log (oldest first), ?limit=N
    POST /snapshot    persist the current snapshot
    """
    app = Flask(__name__)
    app.config["LAB"] = lab

    def _lab() -> Lab:
        return current_app.config["LAB"]

    @app.get("/health")
    def health():
        lab = _lab()
        running = lab.scheduler is not None and lab.scheduler.running
        return jsonify({"ok": not lab.store.closed, "running": running, "ticks": lab.evolver.tick_count})

    @app.get("/state")
    @handle_store_closed
    def state():
        lab = _lab()
        if lab.store.closed:
            raise StoreClosedError("state store already closed")
        return jsonify({"state": lab.snapshot().to_dict()})

    @app.get("/log")
    def event_log():
        entries = _lab().log.entries()
        limit = request.args.get("limit", type=int)
        if limit is not None:
            if limit < 0:
                return jsonify({"error": "limit must be >= 0"}), 400
            entries = entries[-limit:] if limit else ()
        return jsonify({
            "entries": [
                {"timestamp": e.timestamp.isoformat(), "message": e.message}
                for e in entries
            ],
        })

    @app.post("/snapshot")
    @handle_store_closed
    def save_snapshot():
        lab = _lab()
        if lab.store.closed:
            raise StoreClosedError("state store already closed")
        return jsonify(lab.save_snapshot()), 201

    return app
