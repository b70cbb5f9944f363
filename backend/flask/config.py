# config.py - environment driven settings for the catalog service
import os

# -----------------------
# Storage
# -----------------------
DATABASE = os.getenv("CATALOG_DATABASE", "catalog.db")   # path to the sqlite catalog file
DB_TIMEOUT = float(os.getenv("CATALOG_DB_TIMEOUT", "5.0"))  # seconds
TITLES_TABLE = "titles"
INTERACTIONS_TABLE = "interactions"
VIEWERS_TABLE = "viewers"

# -----------------------
# Ranking
# -----------------------
TRENDING_DEFAULT_LIMIT = int(os.getenv("TRENDING_DEFAULT_LIMIT", "5"))

# -----------------------
# Subscription collaborator
# -----------------------
# When unset, subscription state is read from the viewers table instead.
SUBSCRIPTION_API_URL = os.getenv("SUBSCRIPTION_API_URL")
SUBSCRIPTION_API_TIMEOUT = float(os.getenv("SUBSCRIPTION_API_TIMEOUT", "3.0"))

# -----------------------
# Events / HTTP
# -----------------------
KAFKA_BOOTSTRAP = os.getenv("KAFKA_BOOTSTRAP_SERVERS")
KAFKA_TOPIC = os.getenv("KAFKA_TOPIC", "catalog-events")
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
