import os

API_ROOT_PATH = os.getenv("API_ROOT_PATH", "/api/resource-service")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Resource types served by the generic CRUD routes
RESOURCE_TYPES = [
    name.strip()
    for name in os.getenv("RESOURCE_TYPES", "orders,bom,products,users").split(",")
    if name.strip()
]
if not RESOURCE_TYPES:
    raise ValueError("RESOURCE_TYPES environment variable is empty")

SEED_DEMO_DATA = os.getenv("SEED_DEMO_DATA", "false").lower() in ("1", "true", "yes")
