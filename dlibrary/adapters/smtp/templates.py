"""
Notification templates - subject, plain text and HTML bodies.

Every AccountAction has an entry in ACTION_DETAILS; rendering an action
without one is a programming error and raises KeyError.
"""

import html
from dataclasses import dataclass
from datetime import datetime, timezone

from dlibrary.domain.ports import AccountAction, AccountNotice

APP_NAME = "Digital Library"
SUPPORT_EMAIL = "support@digitallibrary.org"


@dataclass(frozen=True)
class RenderedMessage:
    subject: str
    text: str
    html: str


@dataclass(frozen=True)
class ActionDetails:
    subject: str
    title: str
    description: str
    consequences: tuple[str, ...]
    color: str


ACTION_DETAILS: dict[AccountAction, ActionDetails] = {
    AccountAction.BANNED: ActionDetails(
        subject=f"Account Deactivation Notice - {APP_NAME}",
        title="Account Deactivated",
        description=f"Your {APP_NAME} account has been deactivated.",
        consequences=(
            "You can no longer access your account or library resources",
            "All borrowed materials should be returned immediately",
        ),
        color="#DC2626",
    ),
    AccountAction.SUSPENDED: ActionDetails(
        subject=f"Account Suspension Notice - {APP_NAME}",
        title="Account Suspended",
        description=f"Your {APP_NAME} account has been temporarily suspended until {{until}}.",
        consequences=(
            "Your account access is temporarily restricted",
            "You cannot borrow new materials during this period",
            "Access will be available again after {until}",
        ),
        color="#D97706",
    ),
    AccountAction.DELETED: ActionDetails(
        subject=f"Account Removal Notice - {APP_NAME}",
        title="Account Removed",
        description=f"Your {APP_NAME} account has been removed.",
        consequences=(
            "You can no longer sign in to this account",
            "Contact support if you believe this was a mistake",
        ),
        color="#57534E",
    ),
    AccountAction.RESTORED: ActionDetails(
        subject=f"Account Access Restored - {APP_NAME}",
        title="Account Restored",
        description=f"Your {APP_NAME} account access has been restored.",
        consequences=(
            "Full account access has been restored",
            "You can now borrow materials and use all library services",
        ),
        color="#059669",
    ),
    AccountAction.ROLE_CHANGED: ActionDetails(
        subject=f"Account Role Updated - {APP_NAME}",
        title="Role Updated",
        description=f"Your {APP_NAME} account role is now {{role}}.",
        consequences=("Your permissions have been updated to match the new role",),
        color="#2563EB",
    ),
}

VERIFICATION_SUBJECT = f"Verify your {APP_NAME} account"

VERIFICATION_TEXT = """Welcome to {app_name}!

Your verification code is: {code}

Or verify with one click:
{link}

If you did not create an account, you can ignore this email.
"""

VERIFICATION_HTML = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>{subject}</title></head>
<body style="margin: 0; padding: 20px; font-family: 'Segoe UI', Arial, sans-serif; background-color: #f8f9fa; color: #333;">
    <div style="max-width: 600px; margin: 0 auto; background-color: #ffffff; border-radius: 8px; padding: 40px; border: 1px solid #e8e8e8;">
        <h1 style="margin: 0 0 10px 0; font-weight: 300; color: #2c3e50;">Email Verification</h1>
        <p style="color: #555;">Thank you for creating an account with <strong>{app_name}</strong>. Use the code below to complete your registration:</p>
        <div style="margin: 30px auto; text-align: center; font-size: 42px; font-weight: 700; letter-spacing: 8px; font-family: 'Courier New', monospace; color: #2c3e50;">{code}</div>
        <p style="text-align: center;">
            <a href="{link}" style="background-color: #3498db; color: #ffffff; padding: 12px 24px; text-decoration: none; border-radius: 5px; display: inline-block; font-weight: 600;">Verify Automatically</a>
        </p>
        <p style="color: #95a5a6; font-size: 12px; text-align: center;">If you did not request this verification, please disregard this email. Do not share this code with anyone.</p>
    </div>
</body>
</html>
"""

ACTION_TEXT = """Hello{greeting},

{description}
{reason_block}
{consequences}

Actioned by: {admin_name}

If you believe this action was taken in error, contact {support_email}.
-- {app_name}
"""

ACTION_HTML = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="utf-8"><title>{subject}</title></head>
<body style="margin: 0; padding: 20px; font-family: 'Segoe UI', Roboto, sans-serif; background-color: #f1f5f9;">
    <div style="max-width: 600px; margin: 0 auto; background: #ffffff; border-radius: 16px; overflow: hidden; border: 1px solid #e6edf3;">
        <div style="padding: 32px; background: #1e293b; color: #ffffff; text-align: center;">
            <h1 style="margin: 0 0 8px 0; font-size: 24px;">{app_name}</h1>
            <p style="margin: 0; opacity: 0.9; font-size: 14px;">Account Administration</p>
        </div>
        <div style="padding: 32px;">
            <p style="display: inline-block; color: {color}; border: 1px solid {color}; padding: 8px 16px; border-radius: 20px; font-weight: 600;">{title}</p>
            <h2 style="margin: 0 0 16px 0; font-size: 20px; color: #1e293b;">Hello{greeting}</h2>
            <p style="color: #475569; line-height: 1.6;">{description}</p>
            {reason_html}
            <ul style="color: #475569; line-height: 1.6;">{consequences_html}</ul>
            <p style="color: #64748b; font-size: 14px; border-top: 1px solid #e2e8f0; padding-top: 20px;"><strong>Actioned by:</strong> {admin_name}</p>
        </div>
        <div style="padding: 24px 32px; background: #f8fafc; text-align: center; color: #64748b; font-size: 14px;">
            If you believe this action was taken in error, contact <a href="mailto:{support_email}">{support_email}</a>.
        </div>
    </div>
</body>
</html>
"""


def format_until(until: datetime | None) -> str:
    if until is None:
        return "further notice"
    if until.tzinfo is not None:
        until = until.astimezone(timezone.utc)
    return until.strftime("%B %d, %Y %H:%M UTC")


def render_verification(link: str, code: str) -> RenderedMessage:
    return RenderedMessage(
        subject=VERIFICATION_SUBJECT,
        text=VERIFICATION_TEXT.format(app_name=APP_NAME, code=code, link=link),
        html=VERIFICATION_HTML.format(
            subject=html.escape(VERIFICATION_SUBJECT),
            app_name=APP_NAME,
            code=html.escape(code),
            link=html.escape(link, quote=True),
        ),
    )


def render_account_action(notice: AccountNotice) -> RenderedMessage:
    details = ACTION_DETAILS[notice.action]
    until = format_until(notice.until)
    role = notice.new_role or "member"

    description = details.description.format(until=until, role=role)
    consequences = [line.format(until=until) for line in details.consequences]
    greeting = f", {notice.user_name}" if notice.user_name else ""
    admin_name = notice.admin_name or "Library Administration"

    reason_block = f"\nDetails: {notice.reason}\n" if notice.reason else ""
    reason_html = (
        f'<p style="background: #f8fafc; padding: 16px; border-left: 4px solid {details.color};">'
        f"{html.escape(notice.reason)}</p>"
        if notice.reason
        else ""
    )

    text = ACTION_TEXT.format(
        greeting=greeting,
        description=description,
        reason_block=reason_block,
        consequences="\n".join(f"- {line}" for line in consequences),
        admin_name=admin_name,
        support_email=SUPPORT_EMAIL,
        app_name=APP_NAME,
    )
    body = ACTION_HTML.format(
        subject=html.escape(details.subject),
        app_name=APP_NAME,
        color=details.color,
        title=details.title,
        greeting=html.escape(greeting),
        description=html.escape(description),
        reason_html=reason_html,
        consequences_html="".join(f"<li>{html.escape(line)}</li>" for line in consequences),
        admin_name=html.escape(admin_name),
        support_email=SUPPORT_EMAIL,
    )
    return RenderedMessage(subject=details.subject, text=text, html=body)
