#!/usr/bin/env python3
"""
Scripts for running backend and frontend.
"""

import subprocess
import sys

import uvicorn

from backend.config import ConfigurationError, server_address


def run_backend():
    """Run the Flight Finder backend API server on FLIGHT_FINDER_HOST:FLIGHT_FINDER_PORT."""
    try:
        host, port = server_address()
    except ConfigurationError as e:
        print(f"❌ Backend configuration error: {e}")
        sys.exit(1)

    print("🚀 Starting Flight Finder Backend API...")
    print(f"📍 API: http://{host}:{port}")
    print("-" * 40)

    uvicorn.run("backend.api:app", host=host, port=port, reload=True, log_level="info")


def run_frontend():
    """Run the Flight Finder Streamlit frontend."""
    print("🚀 Starting Flight Finder Frontend...")
    print("📍 Frontend: http://localhost:8501")
    print("-" * 40)

    try:
        subprocess.run(
            [
                sys.executable,
                "-m",
                "streamlit",
                "run",
                "frontend/app.py",
                "--server.port=8501",
                "--server.address=0.0.0.0",
            ],
            check=True,
        )
    except KeyboardInterrupt:
        print("\n👋 Frontend stopped")
    except subprocess.CalledProcessError as e:
        print(f"❌ Frontend error: {e}")
        sys.exit(1)
