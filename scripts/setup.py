#!/usr/bin/env python3
"""
Setup script for the Animation Benchmark.
Installs the benchmark with Playwright and the Chromium build it drives.
"""

import subprocess
import sys
from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parent.parent


def run_command(cmd, description):
    """Run a command and report status."""
    print(f"\n📦 {description}...")
    try:
        result = subprocess.run(cmd, shell=True, check=True, capture_output=True, text=True)
        print(f"✅ {description} completed")
        if result.stdout:
            print(result.stdout)
        return True
    except subprocess.CalledProcessError as e:
        print(f"❌ {description} failed")
        if e.stderr:
            print(e.stderr)
        return False


def main():
    print("🚀 Setting up Animation Benchmark...")

    if sys.version_info < (3, 9):
        print("❌ Python 3.9+ required")
        sys.exit(1)

    if not run_command(
        f'{sys.executable} -m pip install -e "{PROJECT_ROOT}"',
        "Installing benchmark and Playwright"
    ):
        sys.exit(1)

    # performance.memory and the DevTools overlay are Chromium-only
    if not run_command(
        f"{sys.executable} -m playwright install chromium",
        "Installing Chromium browser"
    ):
        sys.exit(1)

    print("\n✅ Setup complete! Start the target app on http://localhost:3000, then run:")
    print("   anim-bench --repeats 3")


if __name__ == "__main__":
    main()
