import os
from dotenv import load_dotenv

load_dotenv(dotenv_path=".env")

# Supabase
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_SERVICE_ROLE_KEY = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

# Midtrans (the active gateway row in indb_payment_gateways takes precedence)
MIDTRANS_SERVER_KEY = os.getenv("MIDTRANS_SERVER_KEY", "")
MIDTRANS_IS_PRODUCTION = os.getenv("MIDTRANS_IS_PRODUCTION", "false").lower() == "true"
MIDTRANS_PRODUCTION_URL = "https://api.midtrans.com"
MIDTRANS_SANDBOX_URL = "https://api.sandbox.midtrans.com"

# Application
APP_ENV = os.getenv("APP_ENV", "production")
CRON_SECRET = os.getenv("CRON_SECRET", "")
CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOWED_ORIGINS", "*").split(",")
    if origin.strip()
]

# Realtime
JOB_COMPLETION_BROADCAST_DELAY = float(os.getenv("JOB_COMPLETION_BROADCAST_DELAY", "1.0"))

# Site settings cache (seconds)
SITE_SETTINGS_CACHE_TTL = int(os.getenv("SITE_SETTINGS_CACHE_TTL", "300"))


def is_development() -> bool:
    return APP_ENV.lower() == "development"
