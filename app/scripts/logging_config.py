# logging_config.py
import logging
import logging.config
import logging.handlers
from pathlib import Path
from datetime import datetime
import json
import contextvars

# per-request identifier (kept in a ContextVar)
_request_id_ctx = contextvars.ContextVar("request_id", default="-")

DIAGNOSTICS_LOGGER = "search_diagnostics"

class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id_ctx.get("-")
        return True

def set_request_id(req_id: str):
    _request_id_ctx.set(req_id)

def get_logger(name: str = __name__) -> logging.Logger:
    return logging.getLogger(name)

def _rotating_file(log_dir: Path, filename: str) -> dict:
    return {
        "class": "logging.handlers.TimedRotatingFileHandler",
        "level": "INFO",
        "formatter": "default",
        "filters": ["request_id"],
        "filename": str(log_dir / filename),
        "when": "midnight",
        "interval": 1,
        "backupCount": 30,
        "encoding": "utf-8",
    }

def build_dict_config(json_fmt: bool = False, log_dir: Path = Path("logs")) -> dict:
    fmt = (
        '{"ts":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s",'
        '"request_id":"%(request_id)s","msg":"%(message)s"}'
        if json_fmt
        else '%(asctime)s | %(levelname)s | %(name)s | rid=%(request_id)s | %(message)s'
    )

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_id": {"()": RequestIdFilter},
        },
        "formatters": {
            "default": {
                "format": fmt,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "INFO",
                "formatter": "default",
                "filters": ["request_id"],
            },
            "file_app": _rotating_file(log_dir, "app.log"),
            "file_search_diagnostics": _rotating_file(log_dir, "search_diagnostics.log"),
        },
        "loggers": {
            # root logger: whole app
            "": {
                "level": "INFO",
                "handlers": ["console", "file_app"],
            },
            # orphaned references and per-query summaries
            DIAGNOSTICS_LOGGER: {
                "level": "INFO",
                "handlers": ["console", "file_search_diagnostics"],
                "propagate": False,
            },
            "uvicorn": {"level": "INFO"},
            "uvicorn.error": {"level": "INFO"},
            "uvicorn.access": {"level": "INFO"},
        },
    }

def setup_logging(json_fmt: bool = False, log_dir: str | Path = "logs"):
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_dict_config(json_fmt=json_fmt, log_dir=log_path))

# ===== search diagnostics helpers =====
def log_orphaned_item(item_id: str, raw_store_id: str | None, item_name: str | None = None,
                      logger: logging.Logger | None = None):
    logger = logger or get_logger(DIAGNOSTICS_LOGGER)
    logger.info("ORPHANED_ITEM: %s", json.dumps({
        "timestamp": datetime.now().isoformat(),
        "item_id": item_id,
        "raw_store_id": raw_store_id,
        "item_name": item_name,
    }, ensure_ascii=False))

def log_search_summary(summary: dict, logger: logging.Logger | None = None):
    logger = logger or get_logger(DIAGNOSTICS_LOGGER)
    payload = {
        'query': summary.get('query'),
        'items_scanned': summary.get('items_scanned', 0),
        'stores_indexed': summary.get('stores_indexed', 0),
        'matched': summary.get('matched', 0),
        'orphaned': summary.get('orphaned', 0),
        'without_location': summary.get('without_location', 0),
        'returned': summary.get('returned', 0),
        'with_location': summary.get('with_location', False),
        'duration_ms': summary.get('duration_ms', 0),
    }
    logger.info("SEARCH_SUMMARY: %s", json.dumps(payload, ensure_ascii=False))
