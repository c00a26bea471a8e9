from __future__ import annotations

from flask import (
    Blueprint,
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    session,
    url_for,
)
from flask_login import current_user, login_required
from flask_wtf import FlaskForm
from wtforms import BooleanField, HiddenField, TextAreaField
from wtforms.validators import Length, Optional

from models import STUDENT_ROLE, utcnow
from role_required import role_required
from services import attempts
from services.assignments import student_assignments, visible_assignment
from services.deadlines import classify, countdown_parts, remaining_label, summarise_progress
from services.errors import AlreadySubmitted, InvalidAssignment, NotFound, PastDeadline
from services.identity import identity_for
from services.store import current_store
from services.submissions import can_submit, is_past_deadline, submit
from blueprints.formatting import format_description

bp = Blueprint("student", __name__, url_prefix="/student")

DRAFTS_KEY = "drafts"


class SubmissionForm(FlaskForm):
    assignment_id = HiddenField()
    content = TextAreaField(
        "Your answer",
        validators=[Optional(), Length(max=50000)],
        render_kw={"rows": 14, "placeholder": "Write your answer here..."},
    )
    auto = BooleanField("Submitted automatically", default=False)


class StartForm(FlaskForm):
    assignment_id = HiddenField()


def _drafts() -> dict:
    return dict(session.get(DRAFTS_KEY) or {})


def _load_draft(assignment_id: int) -> str:
    return _drafts().get(str(assignment_id), "")


def _clear_client_state(assignment_id: int) -> None:
    drafts = _drafts()
    if drafts.pop(str(assignment_id), None) is not None:
        session[DRAFTS_KEY] = drafts
    attempts.clear_attempt(session, assignment_id)


def _not_found():
    flash("Assignment not found.", "warning")
    return redirect(url_for("student.dashboard"))


@bp.route("/")
@login_required
@role_required(STUDENT_ROLE)
def dashboard():
    identity = identity_for(current_user)
    store = current_store()
    now = utcnow()
    assignments = student_assignments(store, now)
    submissions = {s.assignment_id: s for s in store.list_submissions_by_student(identity.user_id)}
    rows = [
        {
            "assignment": assignment,
            "submission": submissions.get(assignment.id),
            "state": classify(now, assignment.visible_from, assignment.deadline),
            "label": remaining_label(now, assignment.deadline),
        }
        for assignment in assignments
    ]
    return render_template(
        "student_dashboard.html",
        rows=rows,
        progress=summarise_progress(assignments, submissions.keys(), now),
    )


@bp.route("/assignments/<int:assignment_id>")
@login_required
@role_required(STUDENT_ROLE)
def assignment_view(assignment_id: int):
    identity = identity_for(current_user)
    store = current_store()
    now = utcnow()
    try:
        assignment = visible_assignment(store, assignment_id, now)
    except NotFound:
        return _not_found()

    submission = store.find_submission(assignment.id, identity.user_id)
    attempt = attempts.load_attempt(session, assignment.id) if assignment.is_timed else None
    form = SubmissionForm(formdata=None)
    form.assignment_id.data = str(assignment.id)
    form.content.data = submission.content if submission else _load_draft(assignment.id)

    start_form = StartForm(formdata=None)
    start_form.assignment_id.data = str(assignment.id)

    return render_template(
        "student_assignment.html",
        assignment=assignment,
        submission=submission,
        attempt=attempt,
        remaining_seconds=attempt.remaining_seconds(now) if attempt else None,
        can_submit=can_submit(assignment, submission, now),
        state=classify(now, assignment.visible_from, assignment.deadline),
        label=remaining_label(now, assignment.deadline),
        countdown=countdown_parts(now, assignment.deadline),
        form=form,
        start_form=start_form,
        format_description=format_description,
    )


@bp.route("/assignments/<int:assignment_id>/start", methods=["POST"])
@login_required
@role_required(STUDENT_ROLE)
def assignment_start(assignment_id: int):
    identity = identity_for(current_user)
    store = current_store()
    now = utcnow()
    form = StartForm()
    if not form.validate_on_submit():
        flash("Invalid start request.", "danger")
        return redirect(url_for("student.assignment_view", assignment_id=assignment_id))
    try:
        assignment = visible_assignment(store, assignment_id, now)
    except NotFound:
        return _not_found()

    if store.find_submission(assignment.id, identity.user_id):
        flash("You have already submitted this assignment.", "info")
    elif is_past_deadline(assignment, now):
        flash("The deadline for this assignment has passed.", "danger")
    else:
        try:
            attempts.begin_or_resume(session, assignment, now)
        except InvalidAssignment as exc:
            flash(str(exc), "warning")
    return redirect(url_for("student.assignment_view", assignment_id=assignment.id))


@bp.route("/assignments/<int:assignment_id>/attempt")
@login_required
@role_required(STUDENT_ROLE)
def attempt_status(assignment_id: int):
    """Absolute timing for the client countdown to reconcile against."""
    attempt = attempts.load_attempt(session, assignment_id)
    if attempt is None:
        return jsonify({"started": False}), 404
    now = utcnow()
    return jsonify(
        {
            "started": True,
            "started_at": attempt.to_dict()["started_at"],
            "ends_at": attempt.ends_at.isoformat(),
            "remaining_seconds": attempt.remaining_seconds(now),
            "expired": attempt.expired(now),
        }
    )


@bp.route("/assignments/<int:assignment_id>/draft", methods=["POST"])
@login_required
@role_required(STUDENT_ROLE)
def assignment_draft(assignment_id: int):
    try:
        assignment = visible_assignment(current_store(), assignment_id, utcnow())
    except NotFound:
        return jsonify({"saved": False, "error": "Assignment not found."}), 404
    if assignment.is_timed:
        return jsonify({"saved": False, "error": "Drafts are not kept for timed attempts."}), 400

    form = SubmissionForm()
    if not form.validate_on_submit():
        return jsonify({"saved": False, "error": "Invalid draft."}), 400
    content = form.content.data or ""
    if len(content) > current_app.config["DRAFT_MAX_LENGTH"]:
        return jsonify({"saved": False, "error": "Draft too long to keep, submit to save your work."}), 413

    drafts = _drafts()
    drafts[str(assignment_id)] = content
    session[DRAFTS_KEY] = drafts
    return jsonify({"saved": True})


@bp.route("/assignments/<int:assignment_id>/submit", methods=["POST"])
@login_required
@role_required(STUDENT_ROLE)
def assignment_submit(assignment_id: int):
    identity = identity_for(current_user)
    store = current_store()
    now = utcnow()
    form = SubmissionForm()
    if not form.validate_on_submit():
        flash("Invalid submission.", "danger")
        return redirect(url_for("student.assignment_view", assignment_id=assignment_id))

    content = (form.content.data or "").strip()
    assignment = store.find_assignment(assignment_id)
    timed = assignment is not None and assignment.is_timed
    attempt = attempts.load_attempt(session, assignment_id) if timed else None

    if timed and attempt is None:
        flash("Start the attempt before submitting.", "warning")
        return redirect(url_for("student.assignment_view", assignment_id=assignment_id))
    # Once the time limit has run out every request is an automatic submit.
    expired = timed and attempt.expired(now)
    is_auto = timed and (expired or bool(form.auto.data))
    if not content and not is_auto:
        flash("Write an answer before submitting.", "warning")
        return redirect(url_for("student.assignment_view", assignment_id=assignment_id))

    try:
        if expired:
            attempts.auto_submit(store, attempt, assignment, identity, content, now)
        else:
            submit(store, assignment, identity, content, now)
    except NotFound:
        return _not_found()
    except AlreadySubmitted:
        _clear_client_state(assignment_id)
        flash("You have already submitted this assignment.", "info")
    except PastDeadline:
        _clear_client_state(assignment_id)
        flash("The deadline for this assignment has passed.", "danger")
    else:
        _clear_client_state(assignment_id)
        if is_auto:
            flash("Time is up. Your answer was submitted automatically.", "info")
        else:
            flash("Submission received.", "success")
    return redirect(url_for("student.assignment_view", assignment_id=assignment_id))
