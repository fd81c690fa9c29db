"""MirrorSafe - Mirror STL meshes while keeping small text decals legible."""

import sys
from typing import Optional

from mirrorsafe.cli.app import app


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the MirrorSafe CLI."""
    try:
        app(argv, prog_name="mirrorsafe")
        return 0
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 130
    except SystemExit as e:
        if e.code is None:
            return 0
        return e.code if isinstance(e.code, int) else 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
