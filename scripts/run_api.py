#!/usr/bin/env python
"""
Run the B2B pricing API with uvicorn.

Usage:
    python scripts/run_api.py [--port 8000] [--data-dir ./data] [--no-reload]
"""
import argparse
import subprocess
import sys
import os
from pathlib import Path

DATA_DIR_ENV = "B2B_PRICING_DATA_DIR"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run the B2B pricing API")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--data-dir", type=Path, default=None,
                        help=f"Catalog/tier/quote directory (overrides ${DATA_DIR_ENV})")
    parser.add_argument("--no-reload", action="store_true", help="Disable auto-reload")
    return parser


def main():
    args = build_parser().parse_args()
    project_root = Path(__file__).parent.parent
    os.chdir(project_root)

    # Ensure src is in python path
    env = os.environ.copy()
    src_path = str(project_root / "src")
    if "PYTHONPATH" in env:
        env["PYTHONPATH"] = f"{src_path}{os.pathsep}{env['PYTHONPATH']}"
    else:
        env["PYTHONPATH"] = src_path

    if args.data_dir is not None:
        data_dir = args.data_dir.resolve()
        if not (data_dir / "products.csv").exists():
            print(f"ERROR: products.csv not found in {data_dir}")
            sys.exit(1)
        env[DATA_DIR_ENV] = str(data_dir)

    cmd = [
        sys.executable, "-m", "uvicorn",
        "b2b_pricing.api.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    if not args.no_reload:
        cmd.append("--reload")

    print(f"Starting B2B Pricing API on {args.host}:{args.port} "
          f"(data: {env.get(DATA_DIR_ENV, project_root / 'data')})")
    try:
        subprocess.run(cmd, env=env)
    except KeyboardInterrupt:
        print("\nAPI stopped.")


if __name__ == "__main__":
    main()
