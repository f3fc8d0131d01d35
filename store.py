"""Data access for employees and requests.

Every mutation commits on its own. SQLAlchemy failures are rolled back and
re-raised as TransportError so callers handle the store like any other
remote collaborator.
"""

import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from errors import IntegrityGap, NotFoundError, TransportError
from models import Employee, Request, TaskStatus, db

logger = logging.getLogger(__name__)

TASK_ID_PREFIX = "MR"


def _commit(action):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Store error while %s: %s", action, e)
        raise TransportError(f"Could not {action}. Please try again.") from e


def make_task_id(pk, date_requested):
    return f"{TASK_ID_PREFIX}-{date_requested.year}-{pk:05d}"


# ── Employees ────────────────────────────────────────────────────────

def list_employees():
    return Employee.query.order_by(Employee.full_name).all()


def find_employee_by_code(code):
    employee = Employee.query.filter_by(employee_id=code).first()
    if employee is None:
        raise NotFoundError(f"Employee {code} not found")
    return employee


def create_employee(code, full_name, branch, email=None):
    employee = Employee(
        employee_id=code,
        full_name=full_name,
        branch=branch,
        email=email or None,
    )
    db.session.add(employee)
    _commit(f"create employee {code}")
    logger.info("Created employee %s (%s)", code, full_name)
    return employee


def find_or_create_employee(code, full_name, branch, email=None):
    # Read-then-write: a concurrent insert of the same code is rejected by
    # the unique constraint and surfaces as TransportError.
    try:
        return find_employee_by_code(code)
    except NotFoundError:
        return create_employee(code, full_name, branch, email)


# ── Requests ─────────────────────────────────────────────────────────

def list_requests():
    return Request.query.order_by(Request.date_requested.desc(), Request.id.desc()).all()


def get_request(pk):
    req = db.session.get(Request, pk)
    if req is None:
        raise NotFoundError(f"Request {pk} not found")
    return req


def create_request(employee, task_type, description, target_completion_date,
                   notes=None, image_url=None, now=None):
    now = now or datetime.now()
    req = Request(
        employee_pk=employee.id,
        task_type=getattr(task_type, 'value', task_type),
        task_description=description,
        date_requested=now,
        target_completion_date=target_completion_date,
        status=TaskStatus.PENDING.value,
        notes=notes or None,
        image_url=image_url,
    )
    db.session.add(req)
    try:
        db.session.flush()
        req.task_id = make_task_id(req.id, now)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Store error while creating request: %s", e)
        raise TransportError("Failed to submit request. Please try again.") from e
    _commit(f"create request {req.task_id}")
    logger.info("Created request %s for employee %s", req.task_id, employee.employee_id)
    return req


def update_request_status(pk, status):
    req = get_request(pk)
    req.set_status(status)
    _commit(f"update status of {req.task_id}")
    logger.info("Request %s status -> %s", req.task_id, req.status)
    return req


def change_request_status(pk, status, hooks=None):
    """Commit the new status, then run post-commit hooks.

    Store errors propagate to the caller. Hook failures never do.
    """
    req = update_request_status(pk, status)
    if hooks is not None:
        hooks.run(req)
    return req


def delete_request(pk):
    req = get_request(pk)
    task_id = req.task_id
    db.session.delete(req)
    _commit(f"delete request {task_id}")
    logger.info("Deleted request %s", task_id)


def resolve_employee(req):
    if req.employee is None:
        raise IntegrityGap(f"Request {req.task_id or req.id} has no resolvable employee")
    return req.employee


def list_resolved_requests():
    """All requests whose employee join resolves; gaps are logged and skipped."""
    resolved = []
    for req in list_requests():
        try:
            resolve_employee(req)
        except IntegrityGap as e:
            logger.warning("%s", e)
            continue
        resolved.append(req)
    return resolved
