"""Console entrypoint shim.

The CLI is implemented in `challenge_setup.provisioning.main`.
"""

from __future__ import annotations

from challenge_setup.provisioning.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
