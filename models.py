from datetime import datetime, timezone
from passlib.hash import pbkdf2_sha256
from flask_login import UserMixin
from extensions import db


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


TEACHER_ROLE = "Teacher"
STUDENT_ROLE = "Student"

KIND_PLAIN = "plain"
KIND_QUIZ = "quiz"
KIND_EXAM = "exam"
ASSIGNMENT_KINDS = (KIND_PLAIN, KIND_QUIZ, KIND_EXAM)
TIMED_KINDS = frozenset({KIND_QUIZ, KIND_EXAM})

STATUS_PASS = "pass"
STATUS_FAIL = "fail"
GRADING_STATUSES = (STATUS_PASS, STATUS_FAIL)

# User <-> Role association (many-to-many)
user_roles = db.Table(
    "user_roles",
    db.Column("user_id", db.Integer, db.ForeignKey("users.id"), nullable=False),
    db.Column("role_id", db.Integer, db.ForeignKey("roles.id"), nullable=False),
)

class User(UserMixin, db.Model):
    __tablename__ = "users"
    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(120), nullable=False)
    last_name  = db.Column(db.String(120), nullable=False)
    username   = db.Column(db.String(120), unique=True, index=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    is_active  = db.Column(db.Boolean, default=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)

    roles = db.relationship("Role", secondary=user_roles, back_populates="users")
    submissions = db.relationship("Submission", back_populates="student")

    def set_password(self, raw):
        if raw is None:
            raise ValueError("Password is missing")
        try:
            raw.encode("utf-8")
        except UnicodeEncodeError as exc:
            raise ValueError("Invalid password") from exc
        self.password_hash = pbkdf2_sha256.hash(raw)

    def check_password(self, raw):
        if raw is None:
            return False
        try:
            raw.encode("utf-8")
        except UnicodeEncodeError:
            return False
        try:
            return pbkdf2_sha256.verify(raw, self.password_hash)
        except ValueError:
            return False

    @property
    def display_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def role_names(self):
        return {r.name for r in self.roles}

class Role(db.Model):
    __tablename__ = "roles"
    id   = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(50), unique=True, nullable=False)  # Teacher, Student
    users = db.relationship("User", secondary=user_roles, back_populates="roles")


class Assignment(db.Model):
    __tablename__ = "assignments"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    kind = db.Column(db.String(20), nullable=False, default=KIND_PLAIN)
    visible_from = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    deadline = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    time_limit = db.Column(db.Integer)  # minutes, timed kinds only
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, index=True)
    created_by = db.Column(db.String(120), nullable=False)

    submissions = db.relationship(
        "Submission",
        back_populates="assignment",
        order_by="Submission.submitted_at.desc()",
    )

    @property
    def is_timed(self) -> bool:
        return self.kind in TIMED_KINDS

    @property
    def is_exam(self) -> bool:
        return self.kind == KIND_EXAM


class Submission(db.Model):
    __tablename__ = "submissions"

    id = db.Column(db.Integer, primary_key=True)
    assignment_id = db.Column(db.Integer, db.ForeignKey("assignments.id"), nullable=False)
    student_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    student_name = db.Column(db.String(255), nullable=False)
    content = db.Column(db.Text, nullable=False)
    submitted_at = db.Column(db.DateTime(timezone=True), nullable=False, index=True)
    rating = db.Column(db.Integer)
    status = db.Column(db.String(10))  # 'pass' or 'fail', exams only
    feedback = db.Column(db.Text)
    graded_at = db.Column(db.DateTime(timezone=True))
    graded_by = db.Column(db.String(120))

    assignment = db.relationship("Assignment", back_populates="submissions")
    student = db.relationship("User", back_populates="submissions")

    __table_args__ = (
        db.UniqueConstraint("assignment_id", "student_id", name="uq_submission_assignment_student"),
    )

    @property
    def is_graded(self) -> bool:
        return self.graded_at is not None
