"""Status-change email notifications.

Notification is a side effect of a status change, never part of it: the
status update is committed first, then post-commit hooks run. A failing hook
is logged and recorded on the hook runner; it does not undo the update and
nothing is raised to the caller. There is no de-duplication, so running the
same hook twice sends two emails.
"""

import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from datetime import date, datetime

from jinja2 import Environment

from errors import TransportError
from models import TaskStatus, TaskType

logger = logging.getLogger(__name__)

_env = Environment(autoescape=True)

STATUS_EMAIL_TEMPLATE = _env.from_string("""\
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <div style="background-color: #006633; color: white; padding: 20px; border-radius: 8px 8px 0 0; text-align: center;">
    <h2 style="margin: 0;">Task Status Update</h2>
  </div>
  <div style="border: 1px solid #ddd; padding: 20px; border-radius: 0 0 8px 8px;">
    <p>Dear {{ employee_name }},</p>
    <p>Your multimedia request has been updated. Please see the details below:</p>
    <div style="background-color: #f5f5f5; border-left: 4px solid #006633; padding: 16px; margin: 16px 0; border-radius: 4px;">
      <p style="margin: 8px 0;"><strong>Task ID:</strong> {{ task_id }}</p>
      <p style="margin: 8px 0;"><strong>Task Type:</strong> {{ task_type }}</p>
      <p style="margin: 8px 0;"><strong>Current Status:</strong> <span style="color: #006633; font-weight: bold; font-size: 16px;">{{ status }}</span></p>
      <p style="margin: 8px 0;"><strong>Description:</strong> {{ description }}</p>
      <p style="margin: 8px 0;"><strong>Target Completion Date:</strong> {{ deadline }}</p>
    </div>
    <p style="color: #666; font-size: 14px; margin-top: 20px;">If you have any questions about your request, please contact the admin team.</p>
    <p style="color: #999; font-size: 12px; margin-top: 20px; border-top: 1px solid #ddd; padding-top: 20px;">
      &copy; {{ year }} Multimedia Request Management System. All rights reserved.
    </p>
  </div>
</div>
""")


def long_date(value):
    """Friday, October 23, 2026"""
    if isinstance(value, datetime):
        value = value.date()
    return f"{value:%A}, {value:%B} {value.day}, {value.year}"


@dataclass(frozen=True)
class StatusChangeEvent:
    task_id: str
    employee_email: str | None
    employee_name: str
    status: TaskStatus
    task_type: TaskType
    description: str
    deadline: date

    @classmethod
    def from_request(cls, req):
        employee = req.employee
        return cls(
            task_id=req.task_id,
            employee_email=employee.email,
            employee_name=employee.full_name,
            status=TaskStatus(req.status),
            task_type=TaskType(req.task_type),
            description=req.task_description,
            deadline=req.target_completion_date,
        )


def compose_status_email(event, now=None):
    now = now or datetime.now()
    status = TaskStatus(event.status)
    html = STATUS_EMAIL_TEMPLATE.render(
        employee_name=event.employee_name,
        task_id=event.task_id,
        task_type=TaskType(event.task_type).label,
        status=status.label,
        description=event.description,
        deadline=long_date(event.deadline),
        year=now.year,
    )
    return {
        'to': event.employee_email,
        'subject': f"Task Status Update: {event.task_id} - {status.label}",
        'html': html,
    }


class EmailEndpointTransport:
    """POSTs {to, subject, html} as JSON to the send-email endpoint."""

    def __init__(self, url, timeout=10.0):
        self.url = url
        self.timeout = timeout

    def send(self, message):
        if not self.url:
            raise TransportError("Email endpoint is not configured")

        body = json.dumps(message).encode('utf-8')
        req = urllib.request.Request(
            self.url,
            data=body,
            headers={'Content-Type': 'application/json'},
            method='POST',
        )
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                payload = json.loads(resp.read().decode('utf-8') or '{}')
        except urllib.error.HTTPError as e:
            try:
                payload = json.loads(e.read().decode('utf-8') or '{}')
            except ValueError:
                payload = {'error': e.reason}
            raise TransportError(f"Email endpoint returned {e.code}", payload) from e
        except (urllib.error.URLError, OSError, ValueError) as e:
            raise TransportError(f"Email endpoint unreachable: {e}") from e

        return payload.get('messageId')


def send_status_update_email(event, transport, now=None):
    """Best-effort delivery. Returns the message id, or None when nothing was sent."""
    if not event.employee_email:
        logger.warning("No email address for %s, skipping notification", event.task_id)
        return None

    message = compose_status_email(event, now)
    try:
        message_id = transport.send(message)
    except TransportError as e:
        logger.error("Failed to send email notification for %s: %s %s",
                     event.task_id, e, e.payload or '')
        return None

    logger.info("Email notification sent to %s for %s (id=%s)",
                event.employee_email, event.task_id, message_id)
    return message_id


class PostCommitHooks:
    """Callbacks run after a mutation has been committed.

    Each hook gets the committed object. Exceptions stay here: they are
    logged and appended to `hook_errors` as (hook name, exception).
    """

    def __init__(self, *hooks):
        self.hooks = list(hooks)
        self.hook_errors = []

    def register(self, hook):
        self.hooks.append(hook)
        return hook

    def run(self, payload):
        for hook in self.hooks:
            name = getattr(hook, '__name__', repr(hook))
            try:
                hook(payload)
            except Exception as e:
                logger.exception("Post-commit hook %s failed", name)
                self.hook_errors.append((name, e))


def email_status_hook(transport):
    """Post-commit hook that emails the requester about the new status."""
    def notify_requester(req):
        send_status_update_email(StatusChangeEvent.from_request(req), transport)
    return notify_requester
