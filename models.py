from datetime import datetime
from enum import Enum

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


class TaskStatus(str, Enum):
    PENDING = 'pending'
    IN_PROGRESS = 'in_progress'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'

    @property
    def label(self):
        return STATUS_LABELS[self]


class TaskType(str, Enum):
    TARPAULIN_DESIGN = 'tarpaulin_design'
    VIDEO_EDITING = 'video_editing'
    POSTER_LAYOUT = 'poster_layout'
    SOCIAL_MEDIA_CONTENT = 'social_media_content'
    OTHER = 'other'

    @property
    def label(self):
        return TASK_TYPE_LABELS[self]


class Urgency(str, Enum):
    URGENT = 'urgent'
    CAN_WAIT = 'can_wait'

    @property
    def label(self):
        return URGENCY_LABELS[self]


STATUS_LABELS = {
    TaskStatus.PENDING: 'Pending',
    TaskStatus.IN_PROGRESS: 'In Progress',
    TaskStatus.COMPLETED: 'Completed',
    TaskStatus.CANCELLED: 'Cancelled',
}

TASK_TYPE_LABELS = {
    TaskType.TARPAULIN_DESIGN: 'Tarpaulin Design',
    TaskType.VIDEO_EDITING: 'Video Editing',
    TaskType.POSTER_LAYOUT: 'Poster Layout',
    TaskType.SOCIAL_MEDIA_CONTENT: 'Social Media Content',
    TaskType.OTHER: 'Other',
}

URGENCY_LABELS = {
    Urgency.URGENT: 'Urgent',
    Urgency.CAN_WAIT: 'Can Wait',
}


def _check_labels(enum_cls, labels):
    missing = [member.value for member in enum_cls if member not in labels]
    if missing:
        raise RuntimeError(f"{enum_cls.__name__} has no label for: {', '.join(missing)}")


_check_labels(TaskStatus, STATUS_LABELS)
_check_labels(TaskType, TASK_TYPE_LABELS)
_check_labels(Urgency, URGENCY_LABELS)


def status_label(status):
    return TaskStatus(status).label


def task_type_label(task_type):
    return TaskType(task_type).label


class Employee(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.String(8), unique=True, nullable=False, index=True)  # YYYY-NNN
    full_name = db.Column(db.String(100), nullable=False)
    branch = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(254), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.now, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    def __repr__(self):
        return f"<Employee {self.employee_id} {self.full_name!r}>"


class Request(db.Model):
    id = db.Column(db.Integer, primary_key=True)
    # Assigned right after the insert, see store.create_request
    task_id = db.Column(db.String(20), unique=True, nullable=True)
    employee_pk = db.Column(db.Integer, db.ForeignKey('employee.id'), nullable=False)
    employee = db.relationship('Employee', backref=db.backref('requests', lazy=True), lazy='joined')
    task_type = db.Column(db.String(30), nullable=False)
    task_description = db.Column(db.String(1000), nullable=False)
    date_requested = db.Column(db.DateTime, default=datetime.now, nullable=False)
    target_completion_date = db.Column(db.DateTime, nullable=False)
    status = db.Column(db.String(20), default=TaskStatus.PENDING.value, nullable=False)
    notes = db.Column(db.Text, nullable=True)
    image_url = db.Column(db.String(500), nullable=True)  # social_media_content only
    created_at = db.Column(db.DateTime, default=datetime.now, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    @property
    def status_label(self):
        return status_label(self.status)

    @property
    def task_type_label(self):
        return task_type_label(self.task_type)

    def set_status(self, new_status):
        try:
            self.status = TaskStatus(str(getattr(new_status, 'value', new_status)).lower()).value
        except ValueError:
            raise ValueError(f"Invalid status: {new_status}") from None

    def to_dict(self):
        employee = self.employee
        return {
            'id': self.id,
            'task_id': self.task_id,
            'task_type': self.task_type,
            'task_type_label': self.task_type_label,
            'task_description': self.task_description,
            'date_requested': self.date_requested.isoformat(),
            'target_completion_date': self.target_completion_date.isoformat(),
            'status': self.status,
            'status_label': self.status_label,
            'notes': self.notes,
            'image_url': self.image_url,
            'employee': None if employee is None else {
                'id': employee.id,
                'employee_id': employee.employee_id,
                'full_name': employee.full_name,
                'branch': employee.branch,
                'email': employee.email,
            },
        }

    def __repr__(self):
        return f"<Request {self.task_id} {self.status}>"
