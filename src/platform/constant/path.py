from pathlib import Path


# Repository root (holds src/, test/ and the .env files)
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent

ENV_FILE = BASE_DIR / '.env'
ENV_EXAMPLE_FILE = BASE_DIR / '.env.example'

# Log directory
LOG_DIR = BASE_DIR / 'logs'
