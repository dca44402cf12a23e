import sys
from pathlib import Path

# Ensure the project root (for `linalyze`, `main`) and `backend/` (for `app`) are importable
_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_ROOT))
sys.path.insert(0, str(_ROOT / "backend"))

import matplotlib

matplotlib.use("Agg")
