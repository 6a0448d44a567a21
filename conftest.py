# conftest.py
import sys
from pathlib import Path

# project root holds the flat modules
ROOT = Path(__file__).resolve().parent

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
