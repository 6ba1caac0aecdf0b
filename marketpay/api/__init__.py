# marketpay/api/__init__.py
from marketpay.api.routers import accounts, health, payments, webhooks

ROUTERS = [health.router, payments.router, accounts.router, webhooks.router]
