from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user
from tictactoe import db
from tictactoe.models import User
import re

auth = Blueprint('auth', __name__)

USERNAME_RE = re.compile(r'^[A-Za-z0-9_]{3,30}$')
EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
PASSWORD_RE = re.compile(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$')


def _validate_registration(data):
    errors = []
    username = data.get('username')
    email = data.get('email')
    password = data.get('password')
    if not isinstance(username, str) or not USERNAME_RE.match(username):
        errors.append({'field': 'username',
                       'msg': 'Username must be 3-30 characters and contain only letters, numbers, and underscores'})
    if not isinstance(email, str) or len(email) > 255 or not EMAIL_RE.match(email.strip()):
        errors.append({'field': 'email', 'msg': 'Valid email required'})
    if not isinstance(password, str) or not PASSWORD_RE.match(password):
        errors.append({'field': 'password',
                       'msg': 'Password must be at least 8 characters with uppercase, lowercase, number, and special character'})
    return errors


@auth.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    errors = _validate_registration(data)
    if errors:
        return jsonify({'errors': errors}), 400

    username = data['username']
    email = data['email'].strip().lower()
    existing = User.query.filter((User.username == username) | (User.email == email)).first()
    if existing:
        return jsonify({'error': 'Username or email already exists'}), 409

    user = User(username=username, email=email)
    user.set_password(data['password'])
    db.session.add(user)
    db.session.commit()
    login_user(user)
    current_app.logger.info(f"[auth-register] user={user.id} username={user.username}")
    return jsonify({'message': 'User registered successfully', 'user': user.to_dict()}), 201


@auth.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    username = data.get('username')
    password = data.get('password')
    errors = []
    if not isinstance(username, str) or not username:
        errors.append({'field': 'username', 'msg': 'Username required'})
    if not isinstance(password, str) or not password:
        errors.append({'field': 'password', 'msg': 'Password required'})
    if errors:
        return jsonify({'errors': errors}), 400

    user = User.query.filter_by(username=username).first()
    if user and user.check_password(password):
        login_user(user, remember=True)
        current_app.logger.info(f"[auth-login] user={user.id}")
        return jsonify({'message': 'Login successful', 'user': user.to_dict()})
    current_app.logger.info(f"[auth-login-failed] username={username!r}")
    return jsonify({'error': 'Invalid credentials'}), 401


@auth.route('/logout', methods=['POST'])
def logout():
    logout_user()
    return jsonify({'message': 'Logout successful'})


@auth.route('/me')
@login_required
def me():
    return jsonify({'user': current_user.to_dict()})
