"""
run_thumbnailer.py - CLI Entry Point

This script serves as the command-line interface entry point for the
thumbnail composer. It forwards execution to the CLI logic defined in
`src/thumbnail_composer/cli.py`.

Usage:
    python run_thumbnailer.py first.jpg second.jpg [options]

This wrapper allows you to run the tool directly without needing to
modify PYTHONPATH or install the project as a package.

For help on available options, run:
    python run_thumbnailer.py --help
"""
import sys
# Source code in src/ subdirectory
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parent / "src"))

import thumbnail_composer.cli as tc_cli

if __name__ == "__main__":
    sys.exit(tc_cli.main())
