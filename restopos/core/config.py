import os
from decimal import Decimal

# Database Configuration
# A file-backed SQLite database lets every open view share the same collections
DB_URL = os.getenv("DATABASE_URL", "sqlite://restopos.sqlite3")

# Application Metadata
PROJECT_NAME = "RestoPOS Order Core"
VERSION = "1.0.0"

# Fixed national rates applied to every order total
TAX_RATE = Decimal(os.getenv("TAX_RATE", "0.16"))
SERVICE_CHARGE_RATE = Decimal(os.getenv("SERVICE_CHARGE_RATE", "0.05"))

# Polling Refresh Loop intervals (seconds)
KITCHEN_REFRESH_INTERVAL = float(os.getenv("KITCHEN_REFRESH_INTERVAL", 5))
ORDERS_REFRESH_INTERVAL = float(os.getenv("ORDERS_REFRESH_INTERVAL", 10))

# Notification Bus
NOTIFICATION_LOG_CAP = int(os.getenv("NOTIFICATION_LOG_CAP", 50)) # Entries kept in memory and in the shared log
NOTIFICATION_SYNC_INTERVAL = float(os.getenv("NOTIFICATION_SYNC_INTERVAL", 1)) # How often a view checks the shared log

# Stock levels used by the inventory screens
LOW_STOCK_THRESHOLD = int(os.getenv("LOW_STOCK_THRESHOLD", 10))
CRITICAL_STOCK_THRESHOLD = int(os.getenv("CRITICAL_STOCK_THRESHOLD", 5))
