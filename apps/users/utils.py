# apps/users/utils.py
import logging
import secrets
from django.core.cache import cache

logger = logging.getLogger(__name__)


def generate_otp(length: int = 6) -> str:
    """
    Generate a numeric OTP of `length` digits as a string.
    Example: '034591'
    """
    if length <= 0:
        raise ValueError("length must be > 0")
    # leading zeros allowed
    return "".join(str(secrets.randbelow(10)) for _ in range(length))


def _cache_key(email: str, purpose: str) -> str:
    return f"otp:{purpose}:{email.lower().strip()}"


def create_and_send_otp(
    email: str,
    purpose: str = "verify_email",
    expiry_minutes: int = 10,
    length: int = 6,
    send_async: bool = True,
) -> str:
    """
    Generate OTP, store in cache, and send it through the Celery email task.
    Returns the OTP (useful for tests; never exposed by the API).
    - purpose: a namespace for OTPs (e.g., 'verify_email', 'password_reset')
    - send_async: if False, run the send task inline
    """
    if not email:
        raise ValueError("email is required")

    # imported lazily to avoid circular imports through the tasks module
    from .tasks import send_otp_email

    otp = generate_otp(length=length)
    cache.set(_cache_key(email, purpose), otp, timeout=expiry_minutes * 60)

    if send_async:
        send_otp_email.delay(email, otp, purpose)
    else:
        send_otp_email(email, otp, purpose)

    logger.info("OTP issued for %s (%s)", email, purpose)
    return otp


def verify_otp(email: str, otp: str, purpose: str = "verify_email", erase: bool = True) -> bool:
    """
    Verify OTP for the given email & purpose.
    If erase=True and verification succeeds, the cached OTP will be deleted.
    """
    if not email or not otp:
        return False

    cache_key = _cache_key(email, purpose)
    cached = cache.get(cache_key)

    if cached is None:
        return False

    if str(cached) == str(otp):
        if erase:
            cache.delete(cache_key)
        return True

    return False
