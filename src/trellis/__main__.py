"""Entry point for running Trellis as a module.

Usage:
    python -m trellis [command] [options]

Example:
    python -m trellis build --output _site
    python -m trellis validate
"""

from trellis.cli import app

if __name__ == "__main__":
    app()
