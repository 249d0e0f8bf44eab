import logging
import uuid
from functools import wraps

from flask import flash, g, jsonify, redirect, request, session, url_for
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from database import db
from models import User

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
SESSION_KEY = 'user_id'


class AuthError(Exception):
    pass


def register(email, password, display_name=None):
    """Create an account and sign it in"""
    email = (email or '').strip().lower()
    if not email or '@' not in email:
        raise AuthError('Please enter a valid email address')
    if len(password or '') < MIN_PASSWORD_LENGTH:
        raise AuthError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')
    if db.session.execute(db.select(User).filter_by(email=email)).scalar_one_or_none():
        raise AuthError('An account with this email already exists')

    user = User(
        id=f"user_{uuid.uuid4().hex}",
        email=email,
        password_hash=generate_password_hash(password),
        display_name=(display_name or '').strip() or None,
    )
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise AuthError('An account with this email already exists')

    logger.info(f"Registered user {user.id}")
    _start_session(user)
    return user


def login(email, password):
    email = (email or '').strip().lower()
    user = db.session.execute(db.select(User).filter_by(email=email)).scalar_one_or_none()
    if user is None or not check_password_hash(user.password_hash, password or ''):
        logger.warning(f"Failed sign-in attempt for {email}")
        raise AuthError('Invalid email or password')
    _start_session(user)
    return user


def logout():
    session.pop(SESSION_KEY, None)
    g.user = None


def _start_session(user):
    session.clear()
    session[SESSION_KEY] = user.id
    g.user = user


def load_user():
    """Resolve the signed-in user for the current request"""
    user_id = session.get(SESSION_KEY)
    g.user = db.session.get(User, user_id) if user_id else None


def current_user():
    return g.get('user')


def auth_state():
    user = current_user()
    return {
        'user': user.to_dict() if user else None,
        'is_loading': False,
        'is_authenticated': user is not None,
    }


def login_required(view):
    """Redirect signed-out visitors to the sign-in page, or 401 for API calls"""
    @wraps(view)
    def wrapped(*args, **kwargs):
        if current_user() is None:
            if request.blueprint == 'api':
                return jsonify({
                    'error': 'Authentication required',
                    'details': 'Please sign in to continue'
                }), 401
            flash('Please sign in to continue', 'error')
            return redirect(url_for('pages.login', next=request.path))
        return view(*args, **kwargs)
    return wrapped
