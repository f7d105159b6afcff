"""Pulse entrypoint launching the FastAPI app."""

from __future__ import annotations

import argparse
from pathlib import Path

import uvicorn

from pulse.config import DEFAULT_CONFIG_PATH, PulseConfig, load_config
from pulse.server import create_app
from pulse.store import FallbackPulseStore, JsonlPulseStore
from utils.logger_setup import setup_logging


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the pilot pulse API server")
    parser.add_argument("--host", default="127.0.0.1", help="Host interface to bind")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind")
    parser.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="Path to config YAML")
    parser.add_argument("--store", default=None, help="Override the JSONL response store path")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    config_path = Path(args.config)
    config = load_config(config_path) if config_path.exists() else PulseConfig()
    if args.store:
        config = config.model_copy(update={"store_path": Path(args.store)})
    setup_logging(config)
    store = FallbackPulseStore(JsonlPulseStore(config.store_path))
    app = create_app(store=store, config=config)
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
