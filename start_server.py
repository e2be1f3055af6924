#!/usr/bin/env python3
"""Start the courier desk API under uvicorn, honouring the PORT environment variable."""

import os
import subprocess
import sys

APP_MODULE = "courier_desk.main"


def resolve_port() -> int:
    port = os.environ.get("PORT", "8000")
    try:
        return int(port)
    except ValueError:
        print(f"Warning: Invalid PORT value '{port}', using default 8000", file=sys.stderr)
        return 8000


def configure_pythonpath() -> str:
    src_path = os.path.abspath("src")
    if not os.path.isdir(src_path):
        print(f"Warning: src directory not found at {src_path}", file=sys.stderr)
        src_path = os.getcwd()
    existing = os.environ.get("PYTHONPATH", "")
    os.environ["PYTHONPATH"] = f"{src_path}{os.pathsep}{existing}" if existing else src_path
    if src_path not in sys.path:
        sys.path.insert(0, src_path)
    return src_path


def main() -> int:
    port = resolve_port()
    configure_pythonpath()

    print(f"Starting server on port {port}...", file=sys.stderr)
    print(f"PYTHONPATH={os.environ['PYTHONPATH']}", file=sys.stderr)

    # Fail fast on configuration or import errors before handing over to uvicorn
    try:
        __import__(APP_MODULE)
    except Exception as exc:
        print(f"❌ Failed to import {APP_MODULE} ({type(exc).__name__}): {exc}", file=sys.stderr)
        import traceback
        traceback.print_exc(file=sys.stderr)
        return 1
    print(f"✅ Successfully imported {APP_MODULE}", file=sys.stderr)

    cmd = [
        sys.executable,
        "-m",
        "uvicorn",
        f"{APP_MODULE}:app",
        "--host",
        "0.0.0.0",
        "--port",
        str(port),
        "--proxy-headers",
        "--forwarded-allow-ips", "*",
    ]
    try:
        result = subprocess.call(cmd)
    except KeyboardInterrupt:
        print("⚠️ Server interrupted by user", file=sys.stderr)
        return 0
    if result != 0:
        print(f"❌ Uvicorn exited with code {result}", file=sys.stderr)
    return result


if __name__ == "__main__":
    sys.exit(main())
