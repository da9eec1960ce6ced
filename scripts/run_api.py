#!/usr/bin/env python
"""
Run the MeliDash API with uvicorn.

Usage:
    python scripts/run_api.py [--host 0.0.0.0] [--port 8000] [--no-reload] [--env production]
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path


def main():
    parser = argparse.ArgumentParser(description="Start the MeliDash API (FastAPI + uvicorn)")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--no-reload", action="store_true", help="Disable auto reload")
    parser.add_argument("--env", default=None, help="Overrides MELIDASH_ENV")
    args = parser.parse_args()

    project_root = Path(__file__).parent.parent
    src_path = str(project_root / "src")

    env = os.environ.copy()
    env["PYTHONPATH"] = os.pathsep.join(p for p in (src_path, env.get("PYTHONPATH")) if p)
    if args.env:
        env["MELIDASH_ENV"] = args.env

    cmd = [
        sys.executable, "-m", "uvicorn", "melidash.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    if not args.no_reload:
        cmd.append("--reload")

    print(f"Starting MeliDash API on {args.host}:{args.port}...")
    try:
        subprocess.run(cmd, env=env, cwd=str(project_root))
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
