from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
import os

# Shared limiter; routes attach their own limits
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=os.getenv("RATELIMIT_STORAGE_URL", "memory://"),
    strategy="fixed-window",
    default_limits=["500 per hour"],
)
