"""Entry point frozen into the Windows bundle."""
from __future__ import annotations

import os
import sys

project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from tswio_desktop.runtime.cli import main


if __name__ == "__main__":
    raise SystemExit(main())
