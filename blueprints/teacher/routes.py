from __future__ import annotations

from flask import (
    Blueprint,
    render_template,
    redirect,
    request,
    url_for,
    flash,
)
from flask_login import current_user, login_required
from flask_wtf import FlaskForm
from wtforms import DateTimeLocalField, IntegerField, SelectField, StringField, TextAreaField
from wtforms.validators import DataRequired, InputRequired, Length, NumberRange, Optional
from wtforms.widgets import HiddenInput

from models import ASSIGNMENT_KINDS, KIND_EXAM, KIND_PLAIN, KIND_QUIZ, TEACHER_ROLE, TIMED_KINDS, Assignment, utcnow
from role_required import role_required
from services.assignments import create_assignment, teacher_assignments
from services.deadlines import classify
from services.errors import InvalidAssignment, InvalidGradingFields, NotFound
from services.grading import GradingInput, grade
from services.identity import identity_for
from services.store import current_store
from blueprints.formatting import format_description

bp = Blueprint("teacher", __name__, url_prefix="/teacher")

KIND_LABELS = {
    KIND_PLAIN: "Assignment",
    KIND_QUIZ: "Quiz",
    KIND_EXAM: "Exam",
}


class AssignmentForm(FlaskForm):
    title = StringField("Title", validators=[DataRequired(), Length(max=200)])
    description = TextAreaField(
        "Description",
        validators=[DataRequired(), Length(max=10000)],
        render_kw={"rows": 8, "placeholder": "Instructions for students. Markdown-style bullets are supported."},
    )
    kind = SelectField(
        "Type",
        choices=[(kind, KIND_LABELS[kind]) for kind in ASSIGNMENT_KINDS],
        default=KIND_PLAIN,
        validators=[DataRequired()],
    )
    visible_from = DateTimeLocalField("Visible from (UTC)", format="%Y-%m-%dT%H:%M", validators=[DataRequired()])
    deadline = DateTimeLocalField("Deadline (UTC)", format="%Y-%m-%dT%H:%M", validators=[DataRequired()])
    time_limit = IntegerField(
        "Time limit (minutes)",
        validators=[Optional(), NumberRange(min=1, max=24 * 60)],
        render_kw={"placeholder": "Quizzes and exams only"},
    )


class GradeForm(FlaskForm):
    submission_id = IntegerField(widget=HiddenInput(), validators=[InputRequired()])
    rating = IntegerField("Rating (0-10)", validators=[Optional()], render_kw={"min": 0, "max": 10})
    status = SelectField(
        "Result",
        choices=[("", "Not set"), ("pass", "Pass"), ("fail", "Fail")],
        default="",
        validators=[Optional()],
    )
    feedback = TextAreaField("Feedback", validators=[Optional(), Length(max=5000)], render_kw={"rows": 3})


def _grade_form_for(submission) -> GradeForm:
    form = GradeForm(formdata=None, prefix=f"grade-{submission.id}")
    form.submission_id.data = submission.id
    form.rating.data = submission.rating
    form.status.data = submission.status or ""
    form.feedback.data = submission.feedback
    return form


@bp.route("/")
@login_required
@role_required(TEACHER_ROLE)
def dashboard():
    identity = identity_for(current_user)
    assignments = teacher_assignments(current_store(), identity)
    now = utcnow()
    states = {a.id: classify(now, a.visible_from, a.deadline) for a in assignments}
    return render_template(
        "teacher_dashboard.html",
        assignments=assignments,
        states=states,
        kind_labels=KIND_LABELS,
    )


@bp.route("/assignments/new", methods=["GET", "POST"])
@login_required
@role_required(TEACHER_ROLE)
def assignment_create():
    form = AssignmentForm()
    if not form.is_submitted() and request.args.get("kind") in ASSIGNMENT_KINDS:
        form.kind.data = request.args["kind"]

    if form.validate_on_submit():
        time_limit = form.time_limit.data if form.kind.data in TIMED_KINDS else None
        try:
            assignment = create_assignment(
                current_store(),
                identity_for(current_user),
                title=form.title.data,
                description=form.description.data,
                kind=form.kind.data,
                visible_from=form.visible_from.data,
                deadline=form.deadline.data,
                time_limit=time_limit,
                now=utcnow(),
            )
        except InvalidAssignment as exc:
            flash(str(exc), "danger")
        else:
            flash(f"{KIND_LABELS[assignment.kind]} created successfully.", "success")
            return redirect(url_for("teacher.dashboard"))

    return render_template("teacher_assignment_form.html", form=form, kind_labels=KIND_LABELS)


@bp.route("/assignments/<int:assignment_id>")
@login_required
@role_required(TEACHER_ROLE)
def assignment_detail(assignment_id: int):
    store = current_store()
    assignment = store.find_assignment(assignment_id)
    if not assignment:
        flash("Assignment not found.", "warning")
        return redirect(url_for("teacher.dashboard"))

    submissions = store.list_submissions_by_assignment(assignment.id)
    grade_forms = {submission.id: _grade_form_for(submission) for submission in submissions}
    graded = [s for s in submissions if s.is_graded]
    ratings = [s.rating for s in graded if s.rating is not None]
    return render_template(
        "teacher_assignment_detail.html",
        assignment=assignment,
        submissions=submissions,
        grade_forms=grade_forms,
        graded_count=len(graded),
        average_rating=(sum(ratings) / len(ratings)) if ratings else None,
        state=classify(utcnow(), assignment.visible_from, assignment.deadline),
        kind_labels=KIND_LABELS,
        format_description=format_description,
    )


@bp.route("/submissions/<int:submission_id>/grade", methods=["POST"])
@login_required
@role_required(TEACHER_ROLE)
def submission_grade(submission_id: int):
    store = current_store()
    submission = store.get_submission(submission_id)
    if not submission:
        flash("Submission not found.", "warning")
        return redirect(url_for("teacher.dashboard"))

    assignment: Assignment = submission.assignment
    form = GradeForm(prefix=f"grade-{submission_id}")
    if not form.validate_on_submit() or form.submission_id.data != submission_id:
        flash("Invalid grading request.", "danger")
        return redirect(url_for("teacher.assignment_detail", assignment_id=assignment.id))

    fields = GradingInput(
        rating=form.rating.data,
        status=form.status.data or None,
        feedback=None if assignment.is_exam else form.feedback.data,
    )
    try:
        grade(store, submission, assignment.kind, fields, identity_for(current_user), utcnow())
    except NotFound:
        flash("Submission not found.", "warning")
        return redirect(url_for("teacher.dashboard"))
    except InvalidGradingFields as exc:
        flash(str(exc), "danger")
    else:
        flash(f"Grade saved for {submission.student_name}.", "success")

    return redirect(url_for("teacher.assignment_detail", assignment_id=assignment.id))
