"""Flask JSON API for the preflop coach."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from flask import Flask, jsonify, request

from coach.service import CoachService


def _api_error(message: str, status: int = 400):
    return jsonify({"error": str(message)}), int(status)


@dataclass(frozen=True)
class RuntimeConfig:
    env: str
    host: str
    port: int


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return int(default)
    try:
        return int(str(raw).strip())
    except ValueError:
        return int(default)


def load_runtime_config() -> RuntimeConfig:
    return RuntimeConfig(
        env=str(os.getenv("COACH_ENV", "development")).strip().lower(),
        host=str(os.getenv("COACH_HOST", "127.0.0.1")).strip(),
        port=_env_int("COACH_PORT", 8787),
    )


def create_app(service: Optional[CoachService] = None) -> Flask:
    runtime = load_runtime_config()
    service = service or CoachService()

    app = Flask(__name__)
    app.config["JSON_SORT_KEYS"] = False
    app.config["COACH_RUNTIME"] = runtime

    @app.after_request
    def _after_request(resp):
        resp.headers.setdefault("X-Content-Type-Options", "nosniff")
        resp.headers.setdefault("X-Frame-Options", "DENY")
        resp.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
        return resp

    @app.get("/api/health")
    @app.get("/healthz")
    def health():
        return jsonify({"ok": True})

    @app.get("/api/config")
    def api_config():
        return jsonify(service.app_config())

    def _json_post(payload_handler):
        payload = request.get_json(silent=True) or {}
        if not isinstance(payload, dict):
            return _api_error("JSON object body is required", status=400)
        try:
            return jsonify(payload_handler(payload))
        except (TypeError, ValueError) as exc:
            return _api_error(str(exc), status=400)

    @app.post("/api/generate")
    def api_generate():
        return _json_post(service.generate)

    @app.post("/api/advance")
    def api_advance():
        return _json_post(service.advance)

    @app.post("/api/options")
    def api_options():
        return _json_post(service.options)

    @app.post("/api/act")
    def api_act():
        return _json_post(service.act)

    @app.post("/api/equity")
    def api_equity():
        return _json_post(service.equity)

    @app.post("/api/analyze")
    def api_analyze():
        return _json_post(service.analyze)

    @app.errorhandler(404)
    def not_found(_err):
        return _api_error("Not found", status=404)

    @app.errorhandler(405)
    def method_not_allowed(_err):
        return _api_error("Method not allowed", status=405)

    return app
