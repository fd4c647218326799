"""Allow ``python -m src.cli`` execution."""

import sys

from src.cli.documents import main

sys.exit(main())
