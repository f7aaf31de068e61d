"""Configuration management for the meal plan generator."""
import os
from typing import Final
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# External collaborators
OPENAI_API_KEY: Final[str] = os.getenv('OPENAI_API_KEY', '')
OPENAI_MODEL: Final[str] = os.getenv('OPENAI_MODEL', 'gpt-4o-mini')
SPOONACULAR_API_KEY: Final[str] = os.getenv('SPOONACULAR_API_KEY', '')
NUTRITION_ESTIMATOR: Final[str] = os.getenv('NUTRITION_ESTIMATOR', 'llm').lower()

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'

# Plan horizon
PLAN_DURATION_DAYS: Final[int] = int(os.getenv('PLAN_DURATION_DAYS', '7'))
TWO_PHASE_MIN_DAYS: Final[int] = int(os.getenv('TWO_PHASE_MIN_DAYS', '10'))

# Validation / repair
TOLERANCE_PERCENT: Final[float] = float(os.getenv('TOLERANCE_PERCENT', '15'))
MAX_REPAIR_ROUNDS: Final[int] = int(os.getenv('MAX_REPAIR_ROUNDS', '1'))
REPAIR_TOLERANCE_PERCENT: Final[float] = float(os.getenv('REPAIR_TOLERANCE_PERCENT', '15'))
MAX_EXISTING_TITLES: Final[int] = int(os.getenv('MAX_EXISTING_TITLES', '10'))

# Concurrency towards the generation service
DETAIL_CONCURRENCY: Final[int] = int(os.getenv('DETAIL_CONCURRENCY', '4'))
BACKFILL_BATCH_SIZE: Final[int] = int(os.getenv('BACKFILL_BATCH_SIZE', '5'))
BACKFILL_CONCURRENCY: Final[int] = int(os.getenv('BACKFILL_CONCURRENCY', '3'))
BACKFILL_DELAY_SECONDS: Final[float] = float(os.getenv('BACKFILL_DELAY_SECONDS', '1.0'))

# Single-flight lease; a 'creating' flag older than this is considered stale
PLAN_CREATION_LEASE_SECONDS: Final[int] = int(os.getenv('PLAN_CREATION_LEASE_SECONDS', '600'))

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('DATA_DIR', str(BASE_DIR / 'data')))
