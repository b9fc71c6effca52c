"""Authentication module - student accounts, admin login and password reset."""
