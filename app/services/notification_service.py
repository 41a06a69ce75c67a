import os
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional
from app.core.logger import logger
from app.core.config_loader import get_campus_config
from dotenv import load_dotenv

load_dotenv()

# SMTP Configuration
SMTP_SERVER = os.getenv("SMTP_SERVER", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
SMTP_USERNAME = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")

def get_notification_config() -> dict:
    return get_campus_config().get("notifications", {})

def send_email(subject: str, body: str, to_email: Optional[str] = None) -> bool:
    """
    Sends a plain-text email over SMTP.
    `to_email` defaults to the campus admin_email from config.
    Returns: True if sent, False when disabled, misconfigured or the send failed.
    """
    config = get_campus_config()
    notif_config = config.get("notifications", {})

    if not notif_config.get("email_enabled", False):
        logger.info("ℹ️ Email notifications are disabled in config.")
        return False

    if not to_email:
        to_email = config.get("admin_email")
        if not to_email:
            logger.error("❌ No recipient email found (admin_email missing in config).")
            return False

    if not SMTP_USERNAME or not SMTP_PASSWORD:
        logger.error("❌ SMTP credentials missing in .env.")
        return False

    try:
        msg = MIMEMultipart()
        msg['From'] = SMTP_USERNAME
        msg['To'] = to_email
        msg['Subject'] = subject

        msg.attach(MIMEText(body, 'plain'))

        server = smtplib.SMTP(SMTP_SERVER, SMTP_PORT)
        server.starttls()
        server.login(SMTP_USERNAME, SMTP_PASSWORD)
        server.sendmail(SMTP_USERNAME, to_email, msg.as_string())
        server.quit()

        logger.info(f"✅ Email sent to {to_email} with subject: '{subject}'")
        return True
    except Exception as e:
        logger.error(f"❌ Failed to send email to {to_email}: {e}")
        return False
