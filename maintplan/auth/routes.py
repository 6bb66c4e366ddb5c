from flask import Blueprint, current_app, jsonify
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf import FlaskForm
from wtforms import PasswordField, StringField
from wtforms.validators import DataRequired

from ..extensions import db
from ..models import User

bp = Blueprint("auth", __name__, url_prefix="/auth")


class LoginForm(FlaskForm):
    username = StringField("Username", validators=[DataRequired()])
    password = PasswordField("Password", validators=[DataRequired()])


def _user_payload(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "full_name": user.full_name,
        "role": user.role.name if user.role else None,
    }


@bp.route("/login", methods=["POST"])
def login():
    if current_user.is_authenticated:
        return jsonify({"user": _user_payload(current_user)})

    form = LoginForm()
    if not form.validate_on_submit():
        return jsonify({"error": "Invalid request", "fields": form.errors}), 400
    user = db.session.query(User).filter_by(username=form.username.data).first()
    if user is None or not user.check_password(form.password.data):
        current_app.logger.info("Rejected login for %s", form.username.data)
        return jsonify({"error": "Invalid credentials"}), 401
    login_user(user)
    return jsonify({"user": _user_payload(user)})


@bp.route("/logout", methods=["POST"])
@login_required
def logout():
    logout_user()
    return jsonify({"logged_out": True})


@bp.route("/me")
@login_required
def me():
    return jsonify({"user": _user_payload(current_user)})
