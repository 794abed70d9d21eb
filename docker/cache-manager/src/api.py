from __future__ import annotations

from flask import Blueprint, jsonify, request

from .models import list_clean_runs, load_config, save_config
from .policy import ThresholdConfig
from .scheduler import CacheScheduler


MIN_THRESHOLD_GB = 1.0
MAX_THRESHOLD_GB = 100.0
DEFAULT_HISTORY_LIMIT = 20
MAX_HISTORY_LIMIT = 500


def _parse_config_payload(payload: dict, current: ThresholdConfig) -> ThresholdConfig:
    threshold = payload.get("threshold_gb", current.threshold_gb)
    enabled = payload.get("auto_clean_enabled", current.auto_clean_enabled)

    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        raise ValueError("threshold_gb must be a number")
    if not MIN_THRESHOLD_GB <= float(threshold) <= MAX_THRESHOLD_GB:
        raise ValueError(
            f"threshold_gb must be between {MIN_THRESHOLD_GB:g} and {MAX_THRESHOLD_GB:g}"
        )
    if not isinstance(enabled, bool):
        raise ValueError("auto_clean_enabled must be a boolean")

    return ThresholdConfig(threshold_gb=float(threshold), auto_clean_enabled=enabled)


def _config_to_dict(config: ThresholdConfig) -> dict:
    return {
        "threshold_gb": config.threshold_gb,
        "auto_clean_enabled": config.auto_clean_enabled,
    }


def create_api_blueprint(*, db_path: str, scheduler: CacheScheduler) -> Blueprint:
    blueprint = Blueprint("cache_manager_api", __name__)

    @blueprint.get("/status")
    def status() -> tuple:
        return jsonify(scheduler.snapshot()), 200

    @blueprint.post("/clean")
    def clean() -> tuple:
        outcome, report = scheduler.clean_now(trigger="manual")
        return (
            jsonify(
                {
                    "status": "ok",
                    "files_deleted": outcome.files_deleted,
                    "bytes_reclaimed": outcome.bytes_reclaimed,
                    "cache_size_gb": round(report.gigabytes, 2),
                }
            ),
            200,
        )

    @blueprint.get("/config")
    def get_config() -> tuple:
        return jsonify(_config_to_dict(load_config(db_path))), 200

    @blueprint.put("/config")
    def put_config() -> tuple:
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            return jsonify({"error": "payload must be an object"}), 400
        try:
            config = _parse_config_payload(payload, load_config(db_path))
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400

        save_config(db_path=db_path, config=config)
        return jsonify({"status": "ok", "config": _config_to_dict(config)}), 200

    @blueprint.get("/history")
    def history() -> tuple:
        limit = request.args.get("limit", default=DEFAULT_HISTORY_LIMIT, type=int)
        limit = min(max(int(limit), 1), MAX_HISTORY_LIMIT)
        return jsonify(list_clean_runs(db_path, limit=limit)), 200

    @blueprint.get("/health")
    def health() -> tuple:
        return (
            jsonify(
                {
                    "status": "ok",
                    "scheduler_running": scheduler.is_running,
                }
            ),
            200,
        )

    return blueprint
