# storefront/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/storefront.db")
UPLOADS_DIR = os.getenv("UPLOADS_DIR", "./uploads")
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:5173").split(",") if o.strip()]
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", 3005))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
MAX_ITEM_QUANTITY = int(os.getenv("MAX_ITEM_QUANTITY", 100))
