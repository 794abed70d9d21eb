import logging
import os

from flask import Flask

from .api import create_api_blueprint
from .discovery import discover_cache_dirs_from_containers, discover_cache_directories
from .engine import CacheEngine
from .models import init_db
from .scheduler import CacheScheduler


def _env_flag(name: str, default: str) -> bool:
    return str(os.getenv(name, default)).strip().lower() in {"1", "true", "yes", "on"}


def create_app() -> Flask:
    app = Flask(__name__)

    log_level = str(os.getenv("CM_LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=getattr(logging, log_level, logging.INFO))
    logger = logging.getLogger("cache_manager")

    db_path = str(os.getenv("CM_DB_PATH", "/data/cache_manager.db"))
    check_interval_seconds = int(str(os.getenv("CM_CHECK_INTERVAL_SECONDS", "5")))

    init_db(db_path)

    discovered: list[str] = []
    if _env_flag("CM_DOCKER_DISCOVERY", "true"):
        try:
            discovered = discover_cache_dirs_from_containers()
        except Exception:
            logger.warning(
                "[CACHE]: Failed to auto-discover cache directories from docker labels",
                exc_info=True,
            )

    cache_dirs = discover_cache_directories(extra=discovered)
    logger.info("[CACHE]: Watching %d cache directories", len(cache_dirs))

    engine = CacheEngine(cache_dirs)
    scheduler = CacheScheduler(engine=engine, db_path=db_path, check_interval_seconds=check_interval_seconds)
    scheduler.start()

    app.register_blueprint(create_api_blueprint(db_path=db_path, scheduler=scheduler), url_prefix="/api")
    app.extensions["cache_scheduler"] = scheduler

    return app


def main() -> None:
    app = create_app()
    api_port = int(str(os.getenv("CM_API_PORT", "9200")))
    app.run(host="0.0.0.0", port=api_port)


if __name__ == "__main__":
    main()
