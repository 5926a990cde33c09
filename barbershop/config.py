# barbershop/config.py

import os
import warnings
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    warnings.warn("SECRET_KEY not set, using an insecure development key", RuntimeWarning, stacklevel=2)
    SECRET_KEY = "change-me-later"

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

# bcrypt cost factor; tests lower it to keep repository builds fast
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# All appointment dates and times are wall-clock values in this zone
SHOP_TIMEZONE = os.getenv("SHOP_TIMEZONE", "Europe/Lisbon")

# Enables POST /barbers/me/seed
DEV_SEED_ENABLED = os.getenv("DEV_SEED_ENABLED", "false").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
