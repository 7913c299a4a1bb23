from slowapi import Limiter
from slowapi.util import get_remote_address

# Per-IP limiter for the public, unauthenticated portal endpoints
limiter = Limiter(key_func=get_remote_address)
