"""Entry point for ``python -m bpecodec``."""

import sys

from .cli import main

sys.exit(main())
