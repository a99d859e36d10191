"""Allow ``python -m guitar_tuner``."""

import sys

from .cli.main import main

sys.exit(main())
