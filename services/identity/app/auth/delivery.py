"""
OTP delivery hook.

There is no SMS or email provider behind the portal: issuance is logged, and
the raw code only reaches the log when the development echo is switched on.
"""
import logging

from app.auth.models import OTPCode
from app.auth.utils import mask_email

logger = logging.getLogger(__name__)


def deliver_otp(otp: OTPCode, *, echo: bool = False) -> None:
    if echo:
        logger.info("OTP for %s: %s (development echo)", otp.email, otp.code)
        return
    logger.info(
        "OTP issued for %s, expires at %s",
        mask_email(otp.email),
        otp.expires_at.isoformat(),
    )
