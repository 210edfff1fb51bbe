# vendoriq/services/sms_service.py
import logging

import requests
from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client

from vendoriq.core.config import settings

logger = logging.getLogger(__name__)


def twilio_configured() -> bool:
    return bool(settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN and settings.TWILIO_PHONE_NUMBER)


def get_twilio_client() -> Client:
    return Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)


def send_sms(phone_number: str, body: str) -> bool:
    if not twilio_configured():
        logger.warning(f"Twilio not configured; skipping SMS to {phone_number}")
        return False

    try:
        message = get_twilio_client().messages.create(
            body=body,
            from_=settings.TWILIO_PHONE_NUMBER,
            to=phone_number,
        )
    except TwilioRestException as e:
        logger.error(f"❌ Twilio rejected SMS to {phone_number}: {e.status} {e.msg}")
        return False
    except requests.RequestException as e:
        # Transport failures from the SDK's requests-based HTTP client
        logger.error(f"❌ SMS sending failed for {phone_number}: {e}")
        return False

    logger.info(f"📱 SMS sent to {phone_number} (sid={message.sid}, status={message.status})")
    return True


def send_otp_sms(phone_number: str, otp_code: str) -> bool:
    body = (
        f"Your {settings.PROJECT_NAME} verification code is: {otp_code}. "
        f"Valid for {settings.OTP_EXPIRY_MINUTES} minutes. Do not share this code with anyone."
    )
    return send_sms(phone_number, body)
