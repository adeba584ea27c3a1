import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./callingbird.db")

# Credential encryption - 32 byte AES-256-GCM key as 64 hex characters
# Generate with: python -c "import secrets; print(secrets.token_hex(32))"
MASTER_KEY = os.getenv("MASTER_KEY")

# Security - CRITICAL: No default secret key in production
JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    import warnings

    warnings.warn(
        "JWT_SECRET not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    JWT_SECRET = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only
ADMIN_JWT_SECRET = os.getenv("ADMIN_JWT_SECRET", JWT_SECRET)
JWT_EXPIRATION_MINUTES = int(os.getenv("JWT_EXPIRATION_MINUTES", "1440"))

# Public URLs
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
SERVER_URL = os.getenv("SERVER_URL", "http://localhost:8000")

# Mollie Configuration
MOLLIE_API_KEY = os.getenv("MOLLIE_API_KEY")
MOLLIE_BASE_URL = os.getenv("MOLLIE_BASE_URL", "https://api.mollie.com/v2")
# Webhook Mollie calls on every payment status change
MOLLIE_WEBHOOK_URL = os.getenv("MOLLIE_WEBHOOK_URL", f"{SERVER_URL}/billing/webhooks/mollie")
MOLLIE_REDIRECT_URL = os.getenv("MOLLIE_REDIRECT_URL", f"{FRONTEND_URL}/billing/confirmation")

# Billing
BILLING_CURRENCY = os.getenv("BILLING_CURRENCY", "EUR")
TRIAL_DAYS = int(os.getenv("TRIAL_DAYS", "14"))
INVOICE_DUE_DAYS = int(os.getenv("INVOICE_DUE_DAYS", "7"))

# Vapi assistant configuration API
VAPI_API_KEY = os.getenv("VAPI_API_KEY")
VAPI_BASE_URL = os.getenv("VAPI_BASE_URL", "https://api.vapi.ai")
VAPI_MODEL_PROVIDER = os.getenv("VAPI_MODEL_PROVIDER", "openai")
VAPI_MODEL = os.getenv("VAPI_MODEL", "gpt-4o")
VAPI_VOICE_PROVIDER = os.getenv("VAPI_VOICE_PROVIDER", "11labs")
# Tool calls from the assistant are posted back here
VAPI_TOOL_SERVER_URL = os.getenv("VAPI_TOOL_SERVER_URL", f"{SERVER_URL}/vapi/tools")

# Quiet window before a burst of configuration changes is pushed to Vapi
ASSISTANT_SYNC_DEBOUNCE_MS = int(os.getenv("ASSISTANT_SYNC_DEBOUNCE_MS", "800"))

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "CallingBird <noreply@callingbird.nl>")

# Google Calendar OAuth Configuration
# Note: GOOGLE_REDIRECT_URI should point to FRONTEND (not backend API)
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
GOOGLE_REDIRECT_URI = os.getenv("GOOGLE_REDIRECT_URI", f"{FRONTEND_URL}/integrations/google/callback")

# Outlook (Microsoft identity platform) OAuth Configuration
OUTLOOK_CLIENT_ID = os.getenv("OUTLOOK_CLIENT_ID")
OUTLOOK_CLIENT_SECRET = os.getenv("OUTLOOK_CLIENT_SECRET")
OUTLOOK_TENANT_ID = os.getenv("OUTLOOK_TENANT_ID", "common")
OUTLOOK_REDIRECT_URI = os.getenv("OUTLOOK_REDIRECT_URI", f"{FRONTEND_URL}/integrations/outlook/callback")

# Shopify OAuth Configuration
SHOPIFY_CLIENT_ID = os.getenv("SHOPIFY_CLIENT_ID")
SHOPIFY_CLIENT_SECRET = os.getenv("SHOPIFY_CLIENT_SECRET")
SHOPIFY_SCOPES = os.getenv("SHOPIFY_SCOPES", "read_products,read_orders")
SHOPIFY_API_VERSION = os.getenv("SHOPIFY_API_VERSION", "2024-10")
SHOPIFY_REDIRECT_URI = os.getenv("SHOPIFY_REDIRECT_URI", f"{SERVER_URL}/shopify/callback")

# WooCommerce REST API version used when the store does not specify one
WOO_DEFAULT_VERSION = os.getenv("WOO_DEFAULT_VERSION", "wc/v3")

# CORS
ALLOWED_ORIGINS = os.getenv(
    "ALLOWED_ORIGINS",
    "https://callingbird.nl,https://www.callingbird.nl,http://localhost:5173,http://localhost:3000",
).split(",")
