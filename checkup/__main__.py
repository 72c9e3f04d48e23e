from __future__ import annotations

import sys

from checkup.cli import main

sys.exit(main())
