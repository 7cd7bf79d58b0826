"""Allow ``python -m pixelate``."""

import sys

from pixelate.cli import main

sys.exit(main())
