# File: src/parkledger/__main__.py
"""Allow running the ledger with python -m parkledger"""

import sys

from .main import main

sys.exit(main())
