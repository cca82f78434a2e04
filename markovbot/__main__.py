"""Allow `python -m markovbot`."""

import sys

from markovbot.cli import main

sys.exit(main())
