"""
Rate limiting utilities for outbound provider calls.
"""

from aiolimiter import AsyncLimiter

# Google Geocoding allows 50 QPS per project; stay well below it
google_rate_limiter = AsyncLimiter(25, 1)

# Public Nominatim asks for an average of 1 request per second; allow small bursts
nominatim_rate_limiter = AsyncLimiter(60, 60)
