import logging
import os
import sys
from flask import Flask, redirect, url_for, request, abort, render_template
from config import Config
from extensions import db, login_manager, migrate
from models import User, Role, TEACHER_ROLE, STUDENT_ROLE
from services.deadlines import as_utc
from services.errors import StorageUnavailable, Unauthorized
from blueprints.auth.routes import bp as auth_bp
from blueprints.main.routes import bp as main_bp
from blueprints.student.routes import bp as student_bp
from blueprints.teacher.routes import bp as teacher_bp

log = logging.getLogger(__name__)

SEED_USERS = (
    # username, first name, last name, role, config key holding the password
    ("teacher", "Course", "Teacher", TEACHER_ROLE, "TEACHER_SEED_PASSWORD"),
    ("student", "Demo", "Student", STUDENT_ROLE, "STUDENT_SEED_PASSWORD"),
)


def _configure_logging(level):
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s :: %(message)s",
        stream=sys.stdout,
    )


def _format_datetime(value, fmt="%d %b %Y %H:%M"):
    if value is None:
        return ""
    return as_utc(value).strftime(fmt) + " UTC"


def create_app():
    app = Flask(__name__)
    app.config.from_object(Config)
    _configure_logging(app.config["LOG_LEVEL"])

    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    login_manager.login_view = "auth.login"

    app.register_blueprint(auth_bp)
    app.register_blueprint(main_bp)
    app.register_blueprint(student_bp)
    app.register_blueprint(teacher_bp)

    app.add_template_filter(_format_datetime, "datetime")

    @app.errorhandler(Unauthorized)
    def handle_unauthorized(exc):
        log.warning("Refused %s %s: %s", request.method, request.path, exc)
        return render_template("error.html", message=str(exc)), 403

    @app.errorhandler(StorageUnavailable)
    def handle_storage_unavailable(exc):
        db.session.rollback()
        return render_template("error.html", message=str(exc)), 503

    @app.route("/init")
    def init():
        # Guard: only allow in debug or with INIT_TOKEN
        if not app.debug:
            token = request.args.get("token")
            if not token or token != app.config["INIT_TOKEN"]:
                abort(403)
        # Ensure tables exist before seeding default data (useful for fresh SQLite setups)
        db.create_all()
        for r in [TEACHER_ROLE, STUDENT_ROLE]:
            if not db.session.query(Role).filter_by(name=r).first():
                db.session.add(Role(name=r))
        db.session.commit()
        for username, first_name, last_name, role_name, password_key in SEED_USERS:
            if db.session.query(User).filter_by(username=username).first():
                continue
            u = User(first_name=first_name, last_name=last_name, username=username, is_active=True)
            try:
                u.set_password(app.config[password_key])
            except ValueError as exc:
                return str(exc), 500
            u.roles.append(db.session.query(Role).filter_by(name=role_name).first())
            db.session.add(u)
            db.session.commit()
            log.info("Seeded %s account '%s'", role_name.lower(), username)
        return redirect(url_for("auth.login"))

    return app

if __name__ == "__main__":
    app = create_app()
    debug = os.getenv("FLASK_DEBUG") == "1"
    app.run(host="0.0.0.0", port=5000, debug=debug)
