import os

DB_PATH = os.getenv("CATALOG_DB_PATH", "data/catalog.sqlite")
EXPORT_DIR = os.getenv("CATALOG_EXPORT_DIR", "exports")

# selling price = ceil(original price * MARKUP)
MARKUP = float(os.getenv("CATALOG_MARKUP", "1.10"))

# the TUI owns the terminal, so logs can be redirected to a file
LOG_FILE = os.getenv("CATALOG_LOG_FILE", "")
LOG_LEVEL = os.getenv("CATALOG_LOG_LEVEL", "INFO").upper()

DEFAULT_ADMIN_USER = "admin"
DEFAULT_ADMIN_PASS = "adminadmin"

# printed on every quotation
COMPANY_NAME = "OBRA OFFICE FURNITURE"
COMPANY_TAGLINE = "Professional Office Solutions"
COMPANY_PHONE = "+63 915 743 9188"
COMPANY_EMAIL = "obrafurniture@gmail.com"
CURRENCY_SYMBOL = "P"

QUOTATION_TERMS = [
    "1. Prices are valid for 30 days.",
    "2. 50% downpayment required for custom orders.",
    "3. Goods remain property of OBRA until paid in full.",
]
