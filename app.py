import logging
import os
from datetime import datetime

from flask import Flask, render_template, request, redirect, url_for, send_from_directory, send_file, flash, jsonify
from flask_migrate import Migrate
from sqlalchemy import text

import config
import store
from auth import AdminSession, admin_required
from errors import NotFoundError, TransportError, ValidationError
from filters import EXPORT_PERIODS, Period, apply_filters, count_by_status, export_rows, parse_period, parse_status_filter
from forms import validate_request_form
from models import db, STATUS_LABELS, TASK_TYPE_LABELS, URGENCY_LABELS, TaskType
from notifications import EmailEndpointTransport, PostCommitHooks, email_status_hook
from reports import ExportRefused, check_export_allowed, generate_excel_report, report_filename
from storage import upload_post_image

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s | %(levelname)-7s | %(name)s | %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S',
)

app = Flask(__name__, static_folder='static', template_folder='templates')
app.secret_key = config.SECRET_KEY
app.config['SQLALCHEMY_DATABASE_URI'] = config.SQLALCHEMY_DATABASE_URI
app.config['UPLOAD_FOLDER'] = config.UPLOAD_FOLDER
app.config['MAX_CONTENT_LENGTH'] = config.MAX_CONTENT_LENGTH
app.config['ADMIN_USERNAME'] = config.ADMIN_USERNAME
app.config['ADMIN_PASSWORD'] = config.ADMIN_PASSWORD
app.config['EMAIL_TRANSPORT'] = EmailEndpointTransport(config.EMAIL_ENDPOINT, config.EMAIL_TIMEOUT)
os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

# Set logging level after app is created
app.logger.setLevel(getattr(logging, config.LOG_LEVEL, logging.INFO))

db.init_app(app)
migrate = Migrate(app, db)


@app.context_processor
def inject_labels():
    return {
        'status_labels': STATUS_LABELS,
        'task_type_labels': TASK_TYPE_LABELS,
        'urgency_labels': URGENCY_LABELS,
        'is_admin': AdminSession().is_authenticated,
    }


def status_hooks():
    return PostCommitHooks(email_status_hook(app.config['EMAIL_TRANSPORT']))


@app.route('/')
def index():
    return render_template('index.html')


@app.route('/request', methods=['GET', 'POST'])
def new_request():
    if request.method == 'GET':
        return render_template('request_form.html', form={}, errors={})

    data = request.form.to_dict()
    image = request.files.get('image')
    data['has_image'] = bool(image and image.filename)
    data['image_filename'] = image.filename if image else None

    form, errors = validate_request_form(data)
    if errors:
        return render_template('request_form.html', form=data, errors=errors), 400

    try:
        employee = store.find_or_create_employee(
            form.employee_id, form.full_name, form.branch, form.email)

        image_url = None
        if form.task_type == TaskType.SOCIAL_MEDIA_CONTENT:
            image_url = upload_post_image(image, employee.employee_id)

        req = store.create_request(
            employee,
            form.task_type,
            form.task_description,
            datetime.combine(form.target_completion_date, datetime.min.time()),
            notes=form.notes_with_urgency(),
            image_url=image_url,
        )
    except ValidationError as e:
        return render_template('request_form.html', form=data, errors=e.errors), 400
    except TransportError as e:
        app.logger.error(f"Error submitting request: {e}")
        flash(str(e), 'error')
        return render_template('request_form.html', form=data, errors={}), 502

    flash(f'Task added successfully. Your task ID is {req.task_id}.', 'success')
    return redirect(url_for('new_request'))


@app.route('/uploads/<path:filename>')
def uploaded_file(filename):
    return send_from_directory(app.config['UPLOAD_FOLDER'], filename)


# ── Admin ────────────────────────────────────────────────────────────

def _dashboard_filters():
    try:
        period = parse_period(request.args.get('period'))
    except ValueError:
        flash('Unknown period, showing all requests.', 'warning')
        period = Period.ALL
    try:
        status = parse_status_filter(request.args.get('status'))
    except ValueError:
        flash('Unknown status, showing all statuses.', 'warning')
        status = None
    return period, status, request.args.get('q', '').strip()


@app.route('/admin')
def admin():
    if not AdminSession().is_authenticated:
        return render_template('admin_login.html')

    period, status, query = _dashboard_filters()
    try:
        requests = store.list_resolved_requests()
    except TransportError as e:
        flash(str(e), 'error')
        requests = []

    filtered = apply_filters(requests, period, status, query)
    return render_template(
        'admin.html',
        requests=filtered,
        stats=count_by_status(filtered),
        period=period.value,
        status=status.value if status else 'all',
        query=query,
        periods=[p.value for p in Period],
        export_periods=[p.value for p in EXPORT_PERIODS],
    )


@app.route('/admin/login', methods=['POST'])
def admin_login():
    if AdminSession().login(request.form.get('username'), request.form.get('password')):
        flash('Logged in successfully.', 'success')
        return redirect(url_for('admin'))
    flash('Invalid username or password.', 'error')
    return render_template('admin_login.html'), 401


@app.route('/admin/logout', methods=['POST'])
def admin_logout():
    AdminSession().logout()
    flash('Logged out.', 'success')
    return redirect(url_for('admin'))


@app.route('/admin/requests/<int:request_id>/status', methods=['POST'])
@admin_required
def update_status(request_id):
    new_status = request.form.get('status', '').lower()
    try:
        req = store.change_request_status(request_id, new_status, hooks=status_hooks())
    except ValueError:
        flash(f'Invalid status: {new_status}', 'error')
        return redirect(url_for('admin'))
    except (NotFoundError, TransportError) as e:
        flash(str(e), 'error')
        return redirect(url_for('admin'))

    flash(f'{req.task_id} marked as {req.status_label}.', 'success')
    return redirect(request.referrer or url_for('admin'))


@app.route('/admin/requests/<int:request_id>/delete', methods=['POST'])
@admin_required
def delete_request(request_id):
    try:
        store.delete_request(request_id)
    except (NotFoundError, TransportError) as e:
        flash(str(e), 'error')
        return redirect(url_for('admin'))
    flash('Request deleted.', 'success')
    return redirect(url_for('admin'))


@app.route('/admin/export')
def export_requests():
    try:
        period = parse_period(request.args.get('period'), default=Period.MONTHLY)
        if period not in EXPORT_PERIODS:
            raise ValueError(period)
    except ValueError:
        flash('Choose a weekly, monthly or yearly report.', 'warning')
        return redirect(url_for('admin'))

    is_authenticated = AdminSession().is_authenticated
    rows = []
    try:
        if is_authenticated:
            rows = export_rows(store.list_resolved_requests(), period)
        check_export_allowed(is_loading=False, is_authenticated=is_authenticated, rows=rows)
    except TransportError as e:
        flash(str(e), 'error')
        return redirect(url_for('admin'))
    except ExportRefused as e:
        flash(str(e), 'warning')
        return redirect(url_for('admin'))

    output = generate_excel_report(rows)
    app.logger.info(f"Exported {len(rows)} requests ({period.value})")
    return send_file(output, download_name=report_filename(), as_attachment=True,
                     mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet')


@app.route('/api/requests')
@admin_required
def api_requests():
    period, status, query = _dashboard_filters()
    try:
        requests = store.list_resolved_requests()
    except TransportError as e:
        return {'error': str(e)}, 502

    filtered = apply_filters(requests, period, status, query)
    return jsonify({
        'stats': count_by_status(filtered)._asdict(),
        'requests': [r.to_dict() for r in filtered],
    })


@app.route('/health')
def health_check():
    db_status = 'connected'
    try:
        db.session.execute(text('SELECT 1'))
    except Exception as e:
        app.logger.error(f"Health check failed: {e}")
        db_status = 'error'
    return {'status': 'ok', 'db': db_status}


@app.cli.command('init-db')
def init_db():
    """Create all tables."""
    db.create_all()
    print('Database initialised.')


if __name__ == '__main__':
    with app.app_context():
        db.create_all()
    app.run(debug=config.MRH_ENV == 'development')
