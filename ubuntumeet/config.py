import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# --- Daily.co ---
DAILY_API_KEY_ENV = os.getenv("DAILY_API_KEY_ENV", "DAILY_API_KEY")
DAILY_API_URL = os.getenv("DAILY_API_URL", "https://api.daily.co/v1")
DAILY_DOMAIN = os.getenv("DAILY_DOMAIN")  # e.g. ubuntumeet.daily.co

# --- Supabase ---
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")

# --- Sessions ---
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 20160))
COOKIE_SECURED = os.getenv("COOKIE_SECURED", "false").lower() == "true"

# --- App ---
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")
RECORDINGS_DIR = os.getenv("RECORDINGS_DIR", "recordings")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
PORT = int(os.getenv("PORT", 3000))


def env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")
