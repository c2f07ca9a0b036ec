#!/usr/bin/env python3
"""Launch the simulation clock API server, or drive it headless.

Usage:
    python run.py                          # Start API server
    python run.py --port 8080              # Custom API port
    python run.py --headless --seconds 5   # Run the host loop in-process
    python run.py --headless --speed inf   # Fast-forward headless run
"""

import argparse
import logging
import os
import signal
import socket
import subprocess
import sys
import time

_PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))

logger = logging.getLogger("sim_clock.run")


def _port_in_use(host: str, port: int) -> bool:
    """Return True if *host:port* is already bound."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        try:
            s.bind((host, port))
            return False
        except OSError:
            return True


def _run_headless(args: argparse.Namespace) -> None:
    """Drive the simulator from this process and log diagnostics once a second."""
    sys.path.insert(0, os.path.join(_PROJECT_ROOT, "src"))
    from sim_clock.config import SimConfig
    from sim_clock.simulator import Simulator

    config = SimConfig.from_yaml(args.config) if args.config else SimConfig.from_env()
    sim = Simulator(config)
    sim.run(args.speed, source="cli")
    sim.start_continuous()

    deadline = time.monotonic() + args.seconds
    try:
        while time.monotonic() < deadline:
            time.sleep(1.0)
            latest = sim.telemetry.get_latest()
            rate = sim.diagnostic.average()
            logger.info(
                "t=%s mode=%s steps/s=%s speed=%.2fx height=%.3f",
                sim.clock.elapsed_human_readable,
                sim.clock.mode,
                f"{rate:.1f}" if rate is not None else "n/a",
                latest.speed_factor if latest else 0.0,
                sim.scene.snapshot().height,
            )
    except KeyboardInterrupt:
        pass
    finally:
        sim.stop_continuous()


def main():
    parser = argparse.ArgumentParser(description="Simulation Clock Launcher")
    parser.add_argument(
        "--port", type=int, default=8000, help="API server port (default: 8000)"
    )
    parser.add_argument(
        "--host", type=str, default="127.0.0.1", help="API server host (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--config", type=str, default=None, help="YAML config file (default: $SIM_CLOCK_CONFIG)"
    )
    parser.add_argument(
        "--headless", action="store_true", help="Run the host loop in-process, no server"
    )
    parser.add_argument(
        "--seconds", type=float, default=10.0, help="Headless run length in seconds"
    )
    parser.add_argument(
        "--speed", type=float, default=1.0, help="Headless run speed ('inf' for fast-forward)"
    )
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.headless:
        _run_headless(args)
        return

    # add src/ to PYTHONPATH so sim_clock is importable without pip install
    env = os.environ.copy()
    src_dir = os.path.join(_PROJECT_ROOT, "src")
    env["PYTHONPATH"] = src_dir + os.pathsep + env.get("PYTHONPATH", "")
    if args.config:
        env["SIM_CLOCK_CONFIG"] = os.path.abspath(args.config)

    if _port_in_use(args.host, args.port):
        print(
            f"\n  ERROR: Port {args.port} is already in use.\n"
            f"  Kill the other process or choose a different port:\n"
            f"    python run.py --port {args.port + 1}\n"
        )
        sys.exit(1)

    api_cmd = [
        sys.executable, "-m", "uvicorn",
        "sim_clock.main:app",
        "--host", args.host,
        "--port", str(args.port),
    ]
    print(f"\n  Starting API server on http://{args.host}:{args.port}")
    print(f"  Interactive docs: http://{args.host}:{args.port}/docs\n")
    api_proc = subprocess.Popen(api_cmd, env=env, cwd=_PROJECT_ROOT)

    def cleanup(signum=None, frame=None):
        """Shut down the server process cleanly."""
        if api_proc.poll() is None:
            api_proc.terminate()
        try:
            api_proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            api_proc.kill()
        sys.exit(0)

    signal.signal(signal.SIGINT, cleanup)
    signal.signal(signal.SIGTERM, cleanup)

    try:
        while api_proc.poll() is None:
            time.sleep(1)
        print(f"\n  Server exited with code {api_proc.returncode}.")
    except KeyboardInterrupt:
        cleanup()


if __name__ == "__main__":
    main()
