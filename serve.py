#!/usr/bin/env python3
"""
Start the intake API under uvicorn with the project's logging setup
"""

import os

import uvicorn

from logging_config import configure_logging


def start_server():
    configure_logging()

    host = os.getenv("INTAKE_HOST", "0.0.0.0")
    port = int(os.getenv("INTAKE_PORT", "8000"))
    print(f"Starting Space Intake Agent on {host}:{port}")
    print("-" * 50)

    try:
        # log_config=None keeps the handlers configure_logging installed
        uvicorn.run("intake_agent.main:app", host=host, port=port, log_config=None)
    except KeyboardInterrupt:
        print("\nServer stopped")


if __name__ == "__main__":
    start_server()
