from __future__ import annotations

import os
import sys

# Add project root to path for direct script execution.
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from tswio_desktop.runtime.cli import main


def launch() -> int:
    return main(["desktop", *sys.argv[1:]])


if __name__ == "__main__":
    raise SystemExit(launch())
