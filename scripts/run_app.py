#!/usr/bin/env python
"""
Run the Streamlit pricing console.

Usage:
    python scripts/run_app.py [--port 8501] [--env development] [--no-mock-data]
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path


def main():
    parser = argparse.ArgumentParser(description="Start the MeliDash Streamlit console")
    parser.add_argument("--port", type=int, default=8501)
    parser.add_argument("--env", default=None, help="Overrides MELIDASH_ENV")
    parser.add_argument("--no-mock-data", action="store_true", help="Start with empty services")
    args = parser.parse_args()

    project_root = Path(__file__).parent.parent
    console = project_root / 'src' / 'melidash' / 'ui' / 'app_streamlit.py'
    if not console.exists():
        print(f"ERROR: console not found at {console}")
        sys.exit(1)

    env = os.environ.copy()
    if args.env:
        env['MELIDASH_ENV'] = args.env
    if args.no_mock_data:
        env['MELIDASH_USE_MOCK_DATA'] = 'false'

    cmd = [sys.executable, '-m', 'streamlit', 'run', str(console), '--server.port', str(args.port)]
    print(f"Starting MeliDash console on port {args.port}")

    try:
        subprocess.run(cmd, cwd=str(project_root), env=env)
    except KeyboardInterrupt:
        print("\nConsole stopped.")


if __name__ == "__main__":
    main()
