"""ログイン／ログアウトの処理フローを定義するモジュール。"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify
from flask_login import current_user, login_required, login_user, logout_user

from ...models import User
from .forms import LoginForm

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")
logger = logging.getLogger(__name__)


@auth_bp.route("/login", methods=["POST"])
def login():
    if current_user.is_authenticated:
        return jsonify({"email": current_user.email})

    form = LoginForm()
    if not form.validate_on_submit():
        return jsonify({"error": "validation failed", "fields": form.errors}), 400
    user = User.query.filter_by(email=form.email.data.lower()).first()
    if user is None or not user.check_password(form.password.data):
        logger.info("Failed login for %s", form.email.data)
        return jsonify({"error": "Invalid email or password."}), 401
    login_user(user)
    return jsonify({"email": user.email})


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return jsonify({"message": "Logged out."})
