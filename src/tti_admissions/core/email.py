"""
Email Service using Resend

Sends the admission workflow emails. Templates share one layout; every
user-supplied value is escaped before it reaches the HTML.
"""

import asyncio
import logging
from html import escape

import resend

from tti_admissions.core.config import settings

logger = logging.getLogger(__name__)

# Initialize Resend with API key
resend.api_key = settings.resend_api_key


async def send_email(
    to_emails: list[str],
    subject: str,
    html_content: str,
    from_email: str,
) -> bool:
    """
    Send an email using Resend.

    Args:
        to_emails: Recipient email addresses
        subject: Email subject line
        html_content: HTML content of the email
        from_email: Sender address, e.g. "TTI Admissions <admissions@example.org>"

    Returns:
        True if email was sent successfully
    """
    if not to_emails:
        logger.warning(f"No recipients for email: {subject}")
        return False

    if not resend.api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL TO: {', '.join(to_emails)} | SUBJECT: {subject}")
        return True

    try:
        params: resend.Emails.SendParams = {
            "from": from_email,
            "to": list(to_emails),
            "subject": subject,
            "html": html_content,
        }

        # Run sync Resend call in thread pool to avoid blocking event loop
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent successfully to {len(to_emails)} recipient(s), id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email '{subject}': {e}")
        return False


_LAYOUT = """
    <!DOCTYPE html>
    <html>
    <head>
        <style>
            body {{ font-family: system-ui, -apple-system, sans-serif; line-height: 1.6; color: #1f2937; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 40px 20px; }}
            .header {{ color: #1a365d; margin-bottom: 24px; }}
            .button {{ display: inline-block; background-color: #1a365d; color: white; padding: 14px 28px; text-decoration: none; border-radius: 8px; margin: 24px 0; }}
            .summary-box {{ background-color: #f9fafb; border: 1px solid #e5e7eb; padding: 16px; border-radius: 8px; margin: 16px 0; }}
            .summary-box ul {{ margin: 8px 0 0 0; padding-left: 20px; }}
            .summary-box li {{ margin-bottom: 4px; }}
            .footer {{ margin-top: 40px; padding-top: 20px; border-top: 1px solid #e5e7eb; color: #6b7280; font-size: 14px; }}
        </style>
    </head>
    <body>
        <div class="container">
            <h1 class="header">{title}</h1>

            <p>{greeting}</p>

            {paragraphs}

            {summary}

            {button}

            <div class="footer">
                <p>Best regards,</p>
                <p>{organization}</p>
            </div>
        </div>
    </body>
    </html>
    """


def render_email(
    organization: str,
    title: str,
    greeting: str,
    paragraphs: list[str],
    details: dict[str, str] | None = None,
    button: tuple[str, str] | None = None,
) -> str:
    """
    Render an email body in the shared layout.

    All arguments are plain text and are escaped here. Paragraphs may not
    carry markup.

    Args:
        organization: Sender organization shown in the signature
        title: Heading shown at the top of the email
        greeting: Opening line, e.g. "Hello Asha,"
        paragraphs: Body paragraphs
        details: Optional label -> value summary rendered as a list
        button: Optional (label, url) call to action

    Returns:
        The HTML document
    """
    summary = ""
    if details:
        items = "\n".join(
            f"                    <li><strong>{escape(label)}:</strong> {escape(value)}</li>"
            for label, value in details.items()
        )
        summary = f"""<div class="summary-box">
                <ul>
{items}
                </ul>
            </div>"""

    button_html = ""
    if button:
        label, url = button
        button_html = f'<a href="{escape(url)}" class="button">{escape(label)}</a>'

    return _LAYOUT.format(
        title=escape(title),
        greeting=escape(greeting),
        paragraphs="\n            ".join(f"<p>{escape(p)}</p>" for p in paragraphs),
        summary=summary,
        button=button_html,
        organization=escape(organization),
    )
