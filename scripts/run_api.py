#!/usr/bin/env python
"""
Run the Mealman API locally.

Run manually:
    python scripts/run_api.py --port 3000
"""
import argparse
import logging

import uvicorn

from mealman.app.core.config import get_settings


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the Mealman API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=3000)
    args = parser.parse_args()

    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    uvicorn.run("mealman.app.main:app", host=args.host, port=args.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
