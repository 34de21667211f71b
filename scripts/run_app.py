#!/usr/bin/env python
"""
Run the Streamlit pricing console.

Usage:
    python scripts/run_app.py [--port 8501] [--data-dir ./data]
"""
import argparse
import os
import subprocess
import sys
from pathlib import Path

DATA_DIR_ENV = "B2B_PRICING_DATA_DIR"


def main():
    parser = argparse.ArgumentParser(description="Run the Streamlit pricing console")
    parser.add_argument("--port", type=int, default=8501)
    parser.add_argument("--data-dir", type=Path, default=None,
                        help=f"Catalog/tier/quote directory (overrides ${DATA_DIR_ENV})")
    args = parser.parse_args()

    project_root = Path(__file__).parent.parent
    ui_path = project_root / 'src' / 'b2b_pricing' / 'ui' / 'app_streamlit.py'

    if not ui_path.exists():
        print(f"ERROR: UI module not found at {ui_path}")
        sys.exit(1)

    env = os.environ.copy()
    if args.data_dir is not None:
        env[DATA_DIR_ENV] = str(args.data_dir.resolve())

    cmd = [sys.executable, '-m', 'streamlit', 'run', str(ui_path), '--server.port', str(args.port)]
    print(f"Starting Streamlit: {' '.join(cmd)}")

    try:
        subprocess.run(cmd, cwd=str(project_root), env=env)
    except KeyboardInterrupt:
        print("\nConsole stopped.")


if __name__ == "__main__":
    main()
