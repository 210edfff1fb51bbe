# vendoriq/services/notifier.py
import logging

from vendoriq.services.email_service import send_otp_email, smtp_configured
from vendoriq.services.sms_service import send_otp_sms, twilio_configured

logger = logging.getLogger(__name__)


class Notifier:
    """Delivers a passcode to an address. Delivery is best effort."""

    channel = "console"

    def send(self, identifier: str, code: str) -> bool:
        raise NotImplementedError


class EmailNotifier(Notifier):
    channel = "email"

    def send(self, identifier: str, code: str) -> bool:
        if not smtp_configured():
            # development mode
            logger.info(f"📧 Email OTP for {identifier}: {code}")
            return True
        sent = send_otp_email(identifier, code)
        if not sent:
            logger.warning(f"📧 Email failed for {identifier}")
        return sent


class SmsNotifier(Notifier):
    channel = "sms"

    def send(self, identifier: str, code: str) -> bool:
        if not twilio_configured():
            logger.info(f"📱 SMS OTP for {identifier}: {code}")
            return True
        sent = send_otp_sms(identifier, code)
        if not sent:
            logger.warning(f"📱 SMS failed for {identifier}")
        return sent


email_notifier = EmailNotifier()
sms_notifier = SmsNotifier()
