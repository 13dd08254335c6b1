# runtime settings, read once from the environment
import os

API_URL = os.getenv("STOREFRONT_API_URL", "http://localhost:1111").rstrip("/")

CREDENTIALS_DB_PATH = os.getenv("STOREFRONT_CREDENTIALS_DB", "data/credentials.sqlite")

HTTP_TIMEOUT = float(os.getenv("STOREFRONT_HTTP_TIMEOUT", "10"))

# how long success/failure banners stay up before clearing themselves
ORDER_BANNER_SECONDS = float(os.getenv("STOREFRONT_ORDER_BANNER_SECONDS", "5"))
CART_BANNER_SECONDS = float(os.getenv("STOREFRONT_CART_BANNER_SECONDS", "2"))

DEBUG = bool(os.getenv("STOREFRONT_DEBUG"))
