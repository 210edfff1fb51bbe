# vendoriq/services/email_service.py - SMTP delivery with multi-port fallback
from vendoriq.core.config import settings
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
import logging

logger = logging.getLogger(__name__)

# Ports tried in order when the configured one fails
FALLBACK_PORTS = [587, 465, 2525, 25]


def smtp_configured() -> bool:
    return bool(settings.SMTP_HOST and settings.SMTP_USER and settings.SMTP_PASSWORD)


def send_email(to_email: str, subject: str, html_body: str) -> bool:
    """
    Send an HTML email, trying the configured port first and then the
    common fallbacks. Returns False when SMTP is not configured or every
    port fails.
    """
    if not smtp_configured():
        logger.warning(f"SMTP not configured; skipping email to {to_email}")
        return False

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.FROM_EMAIL or settings.SMTP_USER
    msg["To"] = to_email
    msg.attach(MIMEText("Please view this email in an HTML-compatible email client.", "plain"))
    msg.attach(MIMEText(html_body, "html"))

    ports = [settings.SMTP_PORT] + [p for p in FALLBACK_PORTS if p != settings.SMTP_PORT]
    last_exception = None

    for port in ports:
        try:
            logger.info(f"🔄 Attempting to send email via port {port}")
            if port == 465:
                with smtplib.SMTP_SSL(settings.SMTP_HOST, port, timeout=3) as server:
                    server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
                    server.sendmail(msg["From"], [to_email], msg.as_string())
            else:
                with smtplib.SMTP(settings.SMTP_HOST, port, timeout=3) as server:
                    server.starttls()
                    server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
                    server.sendmail(msg["From"], [to_email], msg.as_string())

            logger.info(f"✅ Email sent successfully to: {to_email} via port {port}")
            return True

        except (smtplib.SMTPException, OSError) as e:
            last_exception = e
            logger.warning(f"❌ Failed to send via port {port}: {e}")

    logger.error(f"❌ All ports failed for {to_email}. Last error: {last_exception}")
    return False


def render_otp_email(otp_code: str) -> str:
    minutes = settings.OTP_EXPIRY_MINUTES
    return f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2 style="color: #333;">{settings.PROJECT_NAME} OTP Verification</h2>
      <p>Your One-Time Password (OTP) for {settings.PROJECT_NAME} is:</p>
      <div style="background-color: #f4f4f4; padding: 20px; text-align: center; margin: 20px 0;">
        <h1 style="color: #007bff; font-size: 32px; margin: 0; letter-spacing: 5px;">{otp_code}</h1>
      </div>
      <p>This OTP is valid for {minutes} minutes. Please do not share this code with anyone.</p>
      <p>If you didn't request this OTP, please ignore this email.</p>
      <hr style="margin: 30px 0;">
      <p style="color: #666; font-size: 12px;">This is an automated message from {settings.PROJECT_NAME}. Please do not reply to this email.</p>
    </div>
    """


def send_otp_email(email: str, otp_code: str) -> bool:
    subject = f"Your {settings.PROJECT_NAME} OTP Code"
    return send_email(email, subject, render_otp_email(otp_code))
