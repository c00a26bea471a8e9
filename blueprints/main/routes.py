from flask import Blueprint, abort, redirect, url_for
from flask_login import login_required, current_user

from services.identity import identity_for

bp = Blueprint("main", __name__)


@bp.route("/")
@login_required
def home():
    identity = identity_for(current_user)
    if identity is None:
        abort(403)
    if identity.is_teacher:
        return redirect(url_for("teacher.dashboard"))
    return redirect(url_for("student.dashboard"))
