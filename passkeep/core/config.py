import os
from pathlib import Path

DATA_DIR = Path(os.getenv("PASSKEEP_DATA_DIR", str(Path.home() / ".passkeep")))

DB_PATH = os.getenv("PASSKEEP_DB_PATH", str(DATA_DIR / "pass.db"))
LOG_PATH = os.getenv("PASSKEEP_LOG_PATH", str(DATA_DIR / "passkeep.log"))
LOG_LEVEL = os.getenv("PASSKEEP_LOG_LEVEL", "INFO")
