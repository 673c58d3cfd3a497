import os
from pathlib import Path
from dotenv import load_dotenv

# Load Environment
script_dir = Path(__file__).resolve().parent.parent
project_root = Path(__file__).resolve().parent.parent.parent
env_path_local = project_root / ".env.local"
env_path_main = project_root / ".env"

if env_path_local.exists():
    load_dotenv(dotenv_path=env_path_local)
elif env_path_main.exists():
    load_dotenv(dotenv_path=env_path_main)
else:
    load_dotenv()

GEMINI_API_KEY = os.getenv("GEMINI_API_KEY")

CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
)

# File Upload Limits
MAX_FILE_MB = int(os.getenv("MAX_UPLOAD_SIZE_MB", "50"))
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", str(script_dir / "uploads" / "documents")))

# Persistence
DEFAULT_SQLITE_PATH = script_dir / "content_engine.db"
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DEFAULT_SQLITE_PATH}")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

# LLM Model Configuration
# Strategy:
# - ANALYSIS: High speed, lower cost. Coarse structure classification of a document prefix.
# - EXTRACTION: Larger output budget. Streams every content item out of the full document.
LLM_ANALYSIS_MODEL = os.getenv("LLM_ANALYSIS_MODEL", "gemini-2.5-flash-lite")
LLM_EXTRACTION_MODEL = os.getenv("LLM_EXTRACTION_MODEL", "gemini-2.5-flash")
LLM_ANALYSIS_MAX_TOKENS = int(os.getenv("LLM_ANALYSIS_MAX_TOKENS", "4000"))
LLM_EXTRACTION_MAX_TOKENS = int(os.getenv("LLM_EXTRACTION_MAX_TOKENS", "8000"))

# Per-pass deadlines (seconds). A timeout counts as a pass failure.
STRUCTURE_TIMEOUT_SECONDS = float(os.getenv("STRUCTURE_TIMEOUT_SECONDS", "60"))
EXTRACTION_TIMEOUT_SECONDS = float(os.getenv("EXTRACTION_TIMEOUT_SECONDS", "300"))

# "model" (two LLM passes) or "rules" (classifier plus rule-based record mapping)
INGEST_STRATEGY = os.getenv("INGEST_STRATEGY", "model")

# Document-type classifier for the rules strategy: "rules" (no LLM calls) or
# "model" (one structure-analysis call picks the type)
INGEST_CLASSIFIER = os.getenv("INGEST_CLASSIFIER", "rules")

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes")
