# public/throttles.py

from rest_framework.throttling import AnonRateThrottle


class PublicWriteThrottle(AnonRateThrottle):
    """
    For public write endpoints (checkout).
    Uses REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']['public_write'].
    """

    scope = "public_write"


class PublicPollThrottle(AnonRateThrottle):
    """
    For public polling endpoints (order lookup).
    Uses REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']['public_poll'].
    """

    scope = "public_poll"
