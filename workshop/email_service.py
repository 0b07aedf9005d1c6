"""
Email Service using a custom SMTP relay or Resend (fallback)
Templates are MJML and compiled to HTML before sending
"""

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from . import config
from .email_templates import booking_confirmation_template
from .shared.errors import DependencyError
from .shared.timeutils import utc_now

logger = logging.getLogger(__name__)


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise DependencyError(f"Failed to compile email template: {str(e)}") from e

    # Depending on the mjml release the result is a dict or an attribute object
    if isinstance(result, dict):
        errors, html = result.get("errors"), result.get("html", "")
    else:
        errors, html = getattr(result, "errors", None), getattr(result, "html", str(result))
    if errors:
        logger.warning(f"MJML compilation warnings: {errors}")
    return html


def send_via_smtp(recipients: list[str], subject: str, html_content: str, sender: str) -> dict:
    """Send through the configured SMTP relay"""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = ", ".join(recipients)
    msg.attach(MIMEText(html_content, "html"))

    context = ssl.create_default_context()
    use_ssl = config.EMAIL_SECURE or config.EMAIL_PORT == 465
    if use_ssl:
        server = smtplib.SMTP_SSL(config.EMAIL_HOST, config.EMAIL_PORT, context=context, timeout=30)
    else:
        server = smtplib.SMTP(config.EMAIL_HOST, config.EMAIL_PORT, timeout=30)

    try:
        if not use_ssl:
            server.starttls(context=context)
        if config.EMAIL_USER:
            server.login(config.EMAIL_USER, config.EMAIL_PASSWORD or "")
        server.sendmail(sender.split("<")[-1].rstrip(">"), recipients, msg.as_string())
    finally:
        try:
            server.quit()
        except smtplib.SMTPException:
            server.close()

    logger.info(f"✅ SMTP email sent via {config.EMAIL_HOST}")
    return {"id": f"smtp-{utc_now().timestamp()}", "success": True}


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email using SMTP (if configured) or Resend (fallback)

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict

    Raises:
        DependencyError: no transport is configured or delivery failed
    """
    html_content = compile_mjml_to_html(mjml_content)

    recipients = [to] if isinstance(to, str) else to
    sender = from_address or config.EMAIL_FROM

    if config.EMAIL_HOST:
        try:
            logger.info(f"📧 Sending email via SMTP: {config.EMAIL_HOST}")
            return send_via_smtp(recipients, subject, html_content, sender)
        except (smtplib.SMTPException, OSError) as e:
            if not config.RESEND_API_KEY:
                logger.error(f"❌ SMTP send to {recipients} failed: {e}")
                raise DependencyError(f"Failed to send email: {str(e)}") from e
            logger.warning(f"⚠️ SMTP failed, falling back to Resend: {e}")

    if not config.RESEND_API_KEY:
        logger.error("❌ No email service configured - EMAIL_HOST and RESEND_API_KEY missing")
        raise DependencyError("Email service not configured")

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        resend.api_key = config.RESEND_API_KEY
        response = resend.Emails.send(
            {
                "from": sender,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise DependencyError(f"Failed to send email: {str(e)}") from e


async def send_booking_confirmation(
    to: str, customer_name: str, service_type: str, vehicle_info: str, date_key: str, time: str
) -> dict:
    """Confirm a booked slot to the customer"""
    mjml_content = booking_confirmation_template(
        customer_name, service_type, vehicle_info, date_key, time
    )
    return await send_email(
        to=to,
        subject=f"Appointment confirmed for {date_key} {time}",
        mjml_content=mjml_content,
    )
