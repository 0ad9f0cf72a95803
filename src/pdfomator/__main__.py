"""Allow ``python -m pdfomator``."""

import sys

from pdfomator.cli import main

sys.exit(main())
