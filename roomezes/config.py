# roomezes.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Calculer le chemin du projet puis charger .env de manière explicite
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Configuration centrale de l'application Roomezes.

- Charge le fichier .env à la racine du projet (BASE_DIR/.env)
- Normalise et expose les secrets/URLs (Supabase, Razorpay, WhatsApp, Resend)
- Expose la sécurité cookies, CORS/hosts
- L'absence des clés WhatsApp/Resend est un état valide: les notifications sont alors journalisées
"""

def _clean_env(v: str) -> str:
    """
    Nettoie une valeur d'environnement:
    - supprime les espaces et guillemets (simples, doubles) et backticks
    - retourne toujours une chaîne (jamais None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _int_env(name: str, default: int) -> int:
    try:
        return int(_clean_env(os.getenv(name) or "") or default)
    except ValueError:
        return default

# Supabase: URL et clés (anon/service)
# - SUPABASE_URL peut parfois être sans schéma: on préfixe en https:// si nécessaire
SUPABASE_URL = _clean_env(os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL") or "")
SUPABASE_ANON = _clean_env(os.getenv("SUPABASE_ANON_KEY") or os.getenv("NEXT_PUBLIC_SUPABASE_ANON_KEY") or "")
SUPABASE_SERVICE_KEY = _clean_env(os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "")

if SUPABASE_URL and not SUPABASE_URL.startswith("http"):
    SUPABASE_URL = "https://" + SUPABASE_URL
if SUPABASE_URL.endswith("/"):
    SUPABASE_URL = SUPABASE_URL.rstrip("/")

# Cookies / sécurité
COOKIE_SECURE = (os.getenv("COOKIE_SECURE", "false").lower() == "true")
SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY", "replace_me_with_a_long_random_secret")

# CORS (dev)
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
ALLOWED_HOSTS = [h.strip() for h in os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",") if h.strip()]

# Razorpay: clé publique (widget), secret (création d'ordre + vérification HMAC)
RAZORPAY_KEY_ID = _clean_env(os.getenv("RAZORPAY_KEY_ID") or os.getenv("NEXT_PUBLIC_RAZORPAY_KEY_ID") or "")
RAZORPAY_KEY_SECRET = _clean_env(os.getenv("RAZORPAY_KEY_SECRET") or "")
RAZORPAY_API_URL = _clean_env(os.getenv("RAZORPAY_API_URL") or "https://api.razorpay.com/v1").rstrip("/")
# Une seule devise supportée par le checkout
CHECKOUT_CURRENCY = "INR"
GATEWAY_TIMEOUT_SECONDS = _int_env("GATEWAY_TIMEOUT_SECONDS", 10)

# WhatsApp Cloud API (notification vendeur)
WHATSAPP_ACCESS_TOKEN = _clean_env(os.getenv("WHATSAPP_ACCESS_TOKEN") or "")
WHATSAPP_PHONE_NUMBER_ID = _clean_env(os.getenv("WHATSAPP_PHONE_NUMBER_ID") or "")
WHATSAPP_API_VERSION = _clean_env(os.getenv("WHATSAPP_API_VERSION") or "v18.0")
VENDOR_NOTIFY_PHONE = _clean_env(os.getenv("VENDOR_NOTIFY_PHONE") or "918459262203")

# Email transactionnel (Resend)
RESEND_API_KEY = _clean_env(os.getenv("RESEND_API_KEY") or "")
EMAIL_FROM = _clean_env(os.getenv("EMAIL_FROM") or "Roomezes <orders@roomezes.app>")
PRINTING_NOTIFY_EMAIL = _clean_env(os.getenv("PRINTING_NOTIFY_EMAIL") or "roomezes5@gmail.com")

BASE_URL = _clean_env(os.getenv("BASE_URL") or "http://localhost:8000")
