import os
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from twilio.rest import Client
import logging

logger = logging.getLogger(__name__)

# --- Email Configuration ---
SMTP_SERVER = os.getenv("SMTP_SERVER")
SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
EMAIL_SENDER = os.getenv("EMAIL_SENDER")

# --- Twilio Configuration ---
TWILIO_ACCOUNT_SID = os.getenv("TWILIO_ACCOUNT_SID")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN")
TWILIO_PHONE_NUMBER = os.getenv("TWILIO_PHONE_NUMBER")

SIGNATURE = "FoodHub Team"


def send_email(to_email: str, subject: str, body_html: str):
    """Sends an email using SMTP."""
    if not all([SMTP_SERVER, SMTP_PORT, SMTP_USER, SMTP_PASSWORD, EMAIL_SENDER]):
        logger.error("SMTP settings are not fully configured. Cannot send email.")
        return False

    message = MIMEMultipart("alternative")
    message["Subject"] = subject
    message["From"] = EMAIL_SENDER
    message["To"] = to_email
    message.attach(MIMEText(body_html, "html"))

    try:
        with smtplib.SMTP(SMTP_SERVER, SMTP_PORT) as server:
            server.starttls()
            server.login(SMTP_USER, SMTP_PASSWORD)
            server.sendmail(EMAIL_SENDER, to_email, message.as_string())
        logger.info(f"Email sent successfully to {to_email}")
        return True
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email to {to_email}: {e}")
        return False


def send_sms(to_phone_number: str, body: str):
    """Sends an SMS using Twilio."""
    if not all([TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN, TWILIO_PHONE_NUMBER]):
        logger.error("Twilio settings are not fully configured. Cannot send SMS.")
        return False

    try:
        client = Client(TWILIO_ACCOUNT_SID, TWILIO_AUTH_TOKEN)
        message = client.messages.create(
            body=body,
            from_=TWILIO_PHONE_NUMBER,
            to=to_phone_number
        )
        logger.info(f"SMS sent successfully to {to_phone_number}, SID: {message.sid}")
        return True
    except Exception as e:
        logger.error(f"Failed to send SMS to {to_phone_number}: {e}")
        return False


# Vendor account notices, keyed by the lifecycle state the vendor moved into
VENDOR_STATE_NOTICES = {
    "pending": (
        "Registration Received",
        "Thanks for registering {restaurant_name}. Our team will review your application shortly.",
    ),
    "active": (
        "Your Vendor Account is Approved",
        "Good news! {restaurant_name} is now live. You can sign in to the dashboard and start adding products.",
    ),
    "rejected": (
        "Vendor Application Update",
        "We're sorry, the application for {restaurant_name} was not approved.",
    ),
    "suspended": (
        "Your Vendor Account is Suspended",
        "{restaurant_name} has been suspended. Please contact support to resolve this.",
    ),
    "deleted": (
        "Your Vendor Account was Closed",
        "The vendor account for {restaurant_name} has been closed.",
    ),
}


def get_vendor_state_email(vendor: dict) -> tuple[str, str]:
    """Generate the email sent when a vendor's account state changes"""
    title, message = VENDOR_STATE_NOTICES[vendor["lifecycle_state"]]
    restaurant_name = vendor.get("restaurant_name") or "your restaurant"

    body = f"""
    <html>
    <body>
        <h2>{title}</h2>
        <p>Hello {vendor.get('name') or 'there'},</p>
        <p>{message.format(restaurant_name=restaurant_name)}</p>

        <div style="background-color: #f5f5f5; padding: 15px; border-radius: 5px;">
            <p><strong>Restaurant:</strong> {restaurant_name}</p>
            <p><strong>Account status:</strong> {vendor['lifecycle_state'].title()}</p>
        </div>

        <p>Best regards,<br>{SIGNATURE}</p>
    </body>
    </html>
    """

    return f"{title} - {restaurant_name}", body


def get_vendor_state_sms(vendor: dict) -> str:
    """Generate the SMS sent when a vendor's account state changes"""
    _, message = VENDOR_STATE_NOTICES[vendor["lifecycle_state"]]
    restaurant_name = vendor.get("restaurant_name") or "your restaurant"
    return f"{message.format(restaurant_name=restaurant_name)} - {SIGNATURE}"


def notify_vendor_state(background_tasks, vendor: dict) -> None:
    """Queue email and SMS notices for a vendor's new lifecycle state"""
    if vendor.get("lifecycle_state") not in VENDOR_STATE_NOTICES:
        return

    if vendor.get("email"):
        subject, body = get_vendor_state_email(vendor)
        background_tasks.add_task(send_email, vendor["email"], subject, body)
    if vendor.get("phone"):
        background_tasks.add_task(send_sms, vendor["phone"], get_vendor_state_sms(vendor))
