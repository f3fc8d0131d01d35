"""Single shared admin login kept in the Flask cookie session.

The flag is issued on login and cleared on logout. It also stores the id of
the process that issued it, so a restart invalidates every open session.
"""

import hmac
import secrets
from functools import wraps

from flask import current_app, flash, redirect, session, url_for

SESSION_KEY = 'admin:authenticated'

BOOT_ID = secrets.token_hex(8)


class AdminSession:

    def __init__(self, store=None):
        self._store = session if store is None else store

    @property
    def is_authenticated(self):
        return self._store.get(SESSION_KEY) == BOOT_ID

    def login(self, username, password):
        expected_user = current_app.config['ADMIN_USERNAME']
        expected_password = current_app.config['ADMIN_PASSWORD']
        ok = (hmac.compare_digest((username or '').encode(), expected_user.encode())
              & hmac.compare_digest((password or '').encode(), expected_password.encode()))
        if ok:
            self._store[SESSION_KEY] = BOOT_ID
            current_app.logger.info("Admin logged in")
        else:
            current_app.logger.warning("Failed admin login for %r", username)
        return bool(ok)

    def logout(self):
        self._store.pop(SESSION_KEY, None)
        current_app.logger.info("Admin logged out")


def admin_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not AdminSession().is_authenticated:
            flash('Please log in to continue.', 'error')
            return redirect(url_for('admin'))
        return f(*args, **kwargs)
    return decorated_function
