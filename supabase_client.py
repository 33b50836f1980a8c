# supabase_client.py
import os

from dotenv import load_dotenv
from supabase import create_client, Client

load_dotenv()

SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")
SCHEMA = os.getenv("SCHEMA", "public")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
TIMEZONE = os.getenv("TIMEZONE", "America/Sao_Paulo")


def get_client() -> Client:
    """
    Build a new Supabase client.

    Each browser session gets its own client because the client also holds
    the signed-in user's auth session.
    """
    if not SUPABASE_URL or not SUPABASE_KEY:
        raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set in the environment")

    return create_client(SUPABASE_URL, SUPABASE_KEY)
