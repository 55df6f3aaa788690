"""
REST API for hostwatch - serves fingerprints and their analysis as JSON.
"""
from __future__ import annotations
from datetime import datetime, timedelta, timezone
from functools import wraps
from typing import Any, Dict
import hashlib

from flask import Flask, current_app, jsonify, request
from flask_cors import CORS
import jwt

from . import __version__
from .analysis import FingerprintAnalyzer
from .config import load_config
from .fingerprint import capture_fingerprint
from .network import NetworkProbe
from .report import fingerprint_to_dict

TOKEN_TTL = timedelta(hours=24)

def _flag(name: str) -> bool:
    return request.args.get(name, "0").lower() in ("1", "true", "yes")

def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        api_cfg = current_app.config["HOSTWATCH"]["api"]
        if not api_cfg.get("require_auth", True):
            return f(None, *args, **kwargs)
        token = request.headers.get("Authorization")
        if not token:
            return jsonify({"message": "Token is missing"}), 401
        if token.startswith("Bearer "):
            token = token[7:]
        try:
            data = jwt.decode(token, current_app.config["SECRET_KEY"], algorithms=["HS256"])
        except jwt.InvalidTokenError as e:
            return jsonify({"message": "Token is invalid", "error": str(e)}), 401
        return f(data["username"], *args, **kwargs)
    return decorated

def create_app(cfg: Dict[str, Any]) -> Flask:
    app = Flask(__name__)
    CORS(app)
    app.config["HOSTWATCH"] = cfg
    app.config["SECRET_KEY"] = cfg["api"]["secret_key"]

    @app.post("/api/login")
    def login():
        data = request.get_json(silent=True) or {}
        username = data.get("username")
        password = data.get("password")
        if not username or not password:
            return jsonify({"message": "Username and password required"}), 400

        users = cfg["api"].get("users") or {}
        password_hash = hashlib.sha256(password.encode()).hexdigest()
        if users.get(username) != password_hash:
            current_app.logger.warning("failed login for %s", username)
            return jsonify({"message": "Invalid credentials"}), 401

        token = jwt.encode(
            {"username": username, "exp": datetime.now(timezone.utc) + TOKEN_TTL},
            app.config["SECRET_KEY"],
            algorithm="HS256",
        )
        return jsonify({"token": token, "username": username})

    @app.get("/api/fingerprint")
    @token_required
    def get_fingerprint(current_user):
        fp = capture_fingerprint(cfg, network=_flag("network"))
        qa = FingerprintAnalyzer.from_config(cfg).analyze(fp)
        if fp.probe_errors:
            current_app.logger.warning("fingerprint captured with %d probe errors", fp.probe_errors)
        return jsonify(fingerprint_to_dict(fp, qa))

    @app.get("/api/network")
    @token_required
    def get_network(current_user):
        net = NetworkProbe.from_config(cfg).probe()
        return jsonify({
            "total_listening": net.total_listening,
            "total_established": net.total_established,
            "unusual_port_count": net.unusual_port_count,
            "listeners_truncated": net.listeners_truncated,
            "connections_truncated": net.connections_truncated,
            "listeners": [vars(l) for l in net.listeners],
            "connections": [vars(c) for c in net.connections],
            "errors": net.errors,
        })

    @app.get("/api/analysis")
    @token_required
    def get_analysis(current_user):
        fp = capture_fingerprint(cfg, network=_flag("network"))
        qa = FingerprintAnalyzer.from_config(cfg).analyze(fp)
        return jsonify({
            "hostname": fp.system.hostname,
            "probe_errors": fp.probe_errors,
            "analysis": qa.as_dict(),
            "timestamp": fp.ts,
        })

    @app.get("/api/health")
    def health():
        return jsonify({"status": "ok", "service": "hostwatch-api", "version": __version__})

    return app

def run_api_server(host: str, port: int, config_path: str | None = None) -> None:
    cfg = load_config(config_path)
    app = create_app(cfg)
    print(f"HostWatch API running on http://{host}:{port}")
    app.run(host=host, port=port, debug=False, use_reloader=False)
