import os
from datetime import datetime, timedelta, timezone

import pytest


@pytest.fixture(scope="session", autouse=True)
def _set_env():
    os.environ.setdefault("FLASK_DEBUG", "0")
    os.environ.setdefault("SECRET_KEY", "test-secret")
    os.environ.setdefault("SQLALCHEMY_DATABASE_URI", "sqlite:///:memory:")
    yield


@pytest.fixture()
def app():
    from app import create_app
    from extensions import db

    app = create_app()
    app.config.update(WTF_CSRF_ENABLED=False)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def t0():
    return datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)


def _make_user(app, username, role_name, first_name, last_name, password):
    from extensions import db
    from models import User, Role

    with app.app_context():
        role = db.session.query(Role).filter_by(name=role_name).first()
        if not role:
            role = Role(name=role_name)
            db.session.add(role)
            db.session.commit()
        user = db.session.query(User).filter_by(username=username).first()
        if not user:
            user = User(
                first_name=first_name,
                last_name=last_name,
                username=username,
                is_active=True,
            )
            user.set_password(password)
            user.roles.append(role)
            db.session.add(user)
            db.session.commit()
        user_id = user.id
        db.session.expunge_all()
    return {"id": user_id, "username": username, "password": password, "name": f"{first_name} {last_name}"}


@pytest.fixture()
def teacher_user(app):
    from models import TEACHER_ROLE

    return _make_user(app, "test_teacher", TEACHER_ROLE, "Test", "Teacher", "Password123!")


@pytest.fixture()
def student_user(app):
    from models import STUDENT_ROLE

    return _make_user(app, "pratibha", STUDENT_ROLE, "Pratibha", "Rao", "Password123!")


@pytest.fixture()
def second_student(app):
    from models import STUDENT_ROLE

    return _make_user(app, "second_student", STUDENT_ROLE, "Second", "Student", "Password123!")


def _login(client, user):
    response = client.post(
        "/auth/login",
        data={"username": user["username"], "password": user["password"]},
        follow_redirects=True,
    )
    assert response.status_code == 200
    return client


@pytest.fixture()
def teacher_client(app, teacher_user):
    return _login(app.test_client(), teacher_user)


@pytest.fixture()
def student_client(app, student_user):
    return _login(app.test_client(), student_user)


@pytest.fixture()
def db_session(app):
    from extensions import db

    with app.app_context():
        yield db.session


@pytest.fixture()
def store(db_session):
    from services.store import EntityStore

    return EntityStore(db_session)


@pytest.fixture()
def teacher(teacher_user):
    from models import TEACHER_ROLE
    from services.identity import Identity

    return Identity(role=TEACHER_ROLE, name=teacher_user["name"], user_id=teacher_user["id"])


@pytest.fixture()
def student(student_user):
    from models import STUDENT_ROLE
    from services.identity import Identity

    return Identity(role=STUDENT_ROLE, name=student_user["name"], user_id=student_user["id"])


@pytest.fixture()
def make_assignment(store, teacher, t0):
    """Create an assignment through the service; times default around ``t0``."""
    from services.assignments import create_assignment

    def _make(kind="plain", visible_from=None, deadline=None, time_limit=None, title="Essay on tides"):
        if kind != "plain" and time_limit is None:
            time_limit = 30
        return create_assignment(
            store,
            teacher,
            title=title,
            description="Explain the **spring** tide.\n- cite two sources",
            kind=kind,
            visible_from=visible_from or t0,
            deadline=deadline or t0 + timedelta(days=7),
            time_limit=time_limit,
            now=t0,
        )

    return _make
