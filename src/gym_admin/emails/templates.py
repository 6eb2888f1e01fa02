"""HTML bodies for owner-facing emails.

Every builder returns ``(subject, html)``. Values that come from the database
or from the operator are escaped before they are placed into markup; the
promotional body is operator-authored text and is rendered as paragraphs.
"""

from __future__ import annotations

import datetime as dt
from html import escape

_BASE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{subject}</title>
  <style>
    body {{ font-family: 'Inter', Arial, sans-serif; margin: 0; padding: 0; background-color: #080808; color: #e0e0e0; }}
    .container {{ max-width: 600px; margin: 20px auto; background-color: #1a1a1a; border: 1px solid #333; border-radius: 8px; overflow: hidden; }}
    .header {{ background-color: #0D0D0D; padding: 20px; text-align: center; border-bottom: 1px solid #333; }}
    .header h1 {{ color: #FFD700; margin: 0; font-size: 24px; }}
    .content {{ padding: 20px; line-height: 1.6; color: #cccccc; }}
    .content h2 {{ color: #FFD700; margin-top: 0; }}
    .content p {{ margin-bottom: 10px; }}
    .content strong {{ color: #FFD700; }}
    .content ul {{ padding-left: 20px; margin-top: 0; }}
    .content li {{ margin-bottom: 5px; }}
    .footer {{ background-color: #0D0D0D; padding: 15px; text-align: center; font-size: 12px; color: #888; border-top: 1px solid #333; }}
    .announcement-content {{ padding: 10px; border-left: 3px solid #FFD700; margin: 10px 0; background-color: #222; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header">
      <h1>{app_name}</h1>
    </div>
    <div class="content">
      {content}
    </div>
    <div class="footer">
      <p>&copy; {year} {app_name}. All rights reserved.</p>
    </div>
  </div>
</body>
</html>
"""

_STATUS_MESSAGES = {
    "inactive": (
        "has been marked as <strong>inactive</strong>. Members will no longer be "
        "able to check in and your dashboard access is suspended."
    ),
    "inactive soon": (
        "is scheduled to become <strong>inactive soon</strong>. Please contact "
        "support to keep your account active."
    ),
    "active": "is now <strong>active</strong>. Welcome back!",
}


def base_email_html(subject: str, app_name: str, content: str, year: int | None = None) -> str:
    """Wrap already-rendered ``content`` in the branded email shell."""
    return _BASE_TEMPLATE.format(
        subject=escape(subject),
        app_name=escape(app_name),
        content=content,
        year=year or dt.date.today().year,
    )


def _paragraphs(text: str) -> str:
    blocks = [b.strip() for b in text.replace("\r\n", "\n").split("\n\n")]
    return "\n".join(
        "<p>" + escape(block).replace("\n", "<br>") + "</p>" for block in blocks if block
    )


def welcome_email(gym_name: str, formatted_gym_id: str, app_name: str) -> tuple[str, str]:
    subject = f"Welcome to {app_name}, {gym_name}!"
    content = (
        f"<h2>Your gym has been approved</h2>"
        f"<p>Hello {escape(gym_name)} team,</p>"
        f"<p>Your registration request has been approved. Use the details below "
        f"to sign in to your owner dashboard:</p>"
        f"<ul><li>Gym ID: <strong>{escape(formatted_gym_id)}</strong></li></ul>"
        f"<p>We are glad to have you on board.</p>"
    )
    return subject, base_email_html(subject, app_name, content)


def rejection_email(gym_name: str, app_name: str) -> tuple[str, str]:
    subject = f"Update on your {app_name} registration"
    content = (
        f"<h2>Registration not approved</h2>"
        f"<p>Thank you for your interest in {escape(app_name)}.</p>"
        f"<p>After review, we are unable to approve the registration for "
        f"<strong>{escape(gym_name)}</strong> at this time. You are welcome to "
        f"reply to this email if you believe this was a mistake.</p>"
    )
    return subject, base_email_html(subject, app_name, content)


def status_change_email(
    gym_name: str, formatted_gym_id: str, status: str, app_name: str
) -> tuple[str, str]:
    if status not in _STATUS_MESSAGES:
        raise ValueError(f"No status email for status {status!r}")
    subject = f"{gym_name}: account status changed to {status}"
    content = (
        f"<h2>Account status update</h2>"
        f"<p>Your gym <strong>{escape(gym_name)}</strong> "
        f"(ID {escape(formatted_gym_id)}) {_STATUS_MESSAGES[status]}</p>"
    )
    return subject, base_email_html(subject, app_name, content)


def promotional_email(gym_name: str, subject: str, body: str, app_name: str) -> tuple[str, str]:
    content = (
        f"<p>Hello {escape(gym_name)} team,</p>"
        f'<div class="announcement-content">{_paragraphs(body)}</div>'
    )
    return subject, base_email_html(subject, app_name, content)
