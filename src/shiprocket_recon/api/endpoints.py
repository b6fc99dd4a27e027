"""Shiprocket external API paths."""

AUTH_LOGIN = "/auth/login"
ORDERS = "/orders"
WALLET_TRANSACTIONS = "/wallet/transactions"
