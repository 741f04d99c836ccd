"""Pytest configuration shared by unit and integration tests"""

import os
import sys
from pathlib import Path

# Add project root to path for knowledge_base imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# knowledge_base.main reads settings on import: never start a bucket scan from tests
os.environ.setdefault("BACKFILL_ON_STARTUP", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")
