"""
auth — User authentication module.

Provides:
  • Access / refresh token issuance & verification (HMAC-SHA256)
  • Password hashing (bcrypt)
  • Register / Login / Refresh / Logout API routes
  • ``get_current_user`` FastAPI dependency guarding protected routes
"""
