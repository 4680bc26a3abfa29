"""
POS Retail Core Module

- cart: session-scoped cart state, drafts and checkout
- db: Redis client used as the persistence store
- services: backend client, money helpers, reports
- routers: FastAPI endpoints for the till front-end
"""
