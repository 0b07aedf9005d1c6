"""
MJML Email Templates
Every template escapes user-provided text before it is placed in the markup
"""

from typing import Optional

from .config import FRONTEND_URL
from .utils.sanitization import sanitize_dict

# Workshop theme colors - Slate/Amber
THEME = {
    "primary": "#f59e0b",
    "background": "#f8fafc",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="40px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>
            <mj-divider border-color="{THEME['border']}" border-width="1px" padding="0 0 24px 0" />

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              You're receiving this because your vehicle is serviced at our workshop.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def service_reminder_template(
    message: str,
    make: str,
    model: str,
    year: int,
    vin: str,
    last_service_type: str,
    last_service_date: str,
) -> str:
    """Reminder with the vehicle identity and its last service"""
    ctx = sanitize_dict(
        {
            "message": message,
            "make": make,
            "model": model,
            "vin": vin,
            "last_service_type": last_service_type,
        }
    )
    content = f"""
    <mj-text>
      {ctx['message']}
    </mj-text>

    <mj-table padding="16px 0">
      <tr>
        <td style="color: {THEME['text_muted']}; padding: 4px 0;">Vehicle</td>
        <td style="padding: 4px 0;">{ctx['make']} {ctx['model']} ({year})</td>
      </tr>
      <tr>
        <td style="color: {THEME['text_muted']}; padding: 4px 0;">VIN</td>
        <td style="padding: 4px 0;">{ctx['vin']}</td>
      </tr>
      <tr>
        <td style="color: {THEME['text_muted']}; padding: 4px 0;">Last Service</td>
        <td style="padding: 4px 0;">{ctx['last_service_type']} on {last_service_date}</td>
      </tr>
    </mj-table>

    <mj-text>
      Please contact us to schedule your next service appointment.
    </mj-text>
    """
    return get_base_template(
        title="Service Reminder",
        preview_text=f"Service reminder for your {ctx['make']} {ctx['model']}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/schedule",
        cta_label="Book a Service",
    )


def booking_confirmation_template(
    customer_name: str,
    service_type: str,
    vehicle_info: str,
    date_key: str,
    time: str,
) -> str:
    """Confirmation sent to the customer after a slot is booked"""
    ctx = sanitize_dict(
        {"customer_name": customer_name, "service_type": service_type, "vehicle_info": vehicle_info}
    )
    content = f"""
    <mj-text>
      Hi {ctx['customer_name']},
    </mj-text>

    <mj-text>
      Your <strong>{ctx['service_type']}</strong> appointment is booked for
      <strong>{date_key}</strong> at <strong>{time}</strong>.
    </mj-text>

    <mj-text color="{THEME['text_muted']}">
      Vehicle: {ctx['vehicle_info']}
    </mj-text>
    """
    return get_base_template(
        title="Appointment Confirmed",
        preview_text=f"Your appointment on {date_key} at {time}",
        content_sections=content,
    )
