"""Allow ``python -m src.rendering`` to run the CLI."""

import sys

from src.rendering.cli import main

sys.exit(main())
