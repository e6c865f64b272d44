"""Allow ``python -m jinja_schema``."""

import sys

from jinja_schema.cli import main

sys.exit(main())
