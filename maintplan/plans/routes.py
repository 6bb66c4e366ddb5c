from flask import Blueprint, current_app, jsonify
from flask_login import current_user, login_required
from flask_wtf import FlaskForm
from wtforms import BooleanField, DateField, StringField, TextAreaField
from wtforms.validators import InputRequired, Length, Optional

from ..extensions import db
from ..planning import NotFound, PlanService, ValidationError

bp = Blueprint("plans", __name__, url_prefix="/plans")


class ApiForm(FlaskForm):
    class Meta:
        csrf = False


class CompletionForm(ApiForm):
    completed_by = StringField("Completed by", validators=[Optional(), Length(max=120)])
    completed_date = DateField("Completed date", validators=[Optional()])
    notes = TextAreaField("Notes", validators=[Optional()])


class RescheduleForm(ApiForm):
    scheduled_date = DateField("Scheduled date", validators=[InputRequired()])


class ResetForm(ApiForm):
    confirm = BooleanField("Confirm")


def _service() -> PlanService:
    return PlanService.for_app(current_app, db.session)


def _form_errors(form):
    return jsonify({"error": "Invalid request", "fields": form.errors}), 400


@bp.errorhandler(NotFound)
def handle_not_found(error):
    return jsonify({"error": str(error)}), 404


@bp.errorhandler(ValidationError)
def handle_validation_error(error):
    return jsonify({"error": str(error)}), 400


@bp.route("/facility/<owner_id>/<int:year>")
@login_required
def facility_plan(owner_id: str, year: int):
    service = _service()
    rows = service.list_by_owner_year(owner_id, year)
    return jsonify({"data": rows, "summary": service.summary(owner_id, year, rows)})


@bp.route("/facility/<owner_id>/<int:year>/generate", methods=["POST"])
@login_required
def generate(owner_id: str, year: int):
    result = _service().generate(owner_id, year)
    current_app.logger.info(
        "%s generated %d occurrences for facility %s/%d",
        current_user.username, result.generated, owner_id, year,
    )
    return jsonify(result.to_dict())


@bp.route("/facility/<owner_id>/<int:year>/reset", methods=["POST"])
@login_required
def reset(owner_id: str, year: int):
    form = ResetForm()
    if not form.confirm.data:
        return jsonify({"error": "Reset must be confirmed"}), 400
    result = _service().reset(owner_id, year)
    current_app.logger.warning(
        "%s reset the plan of facility %s/%d (%d deleted)",
        current_user.username, owner_id, year, result.deleted,
    )
    return jsonify(result.to_dict())


@bp.route("/equipment/<equipment_id>/<int:year>")
@login_required
def equipment_plan(equipment_id: str, year: int):
    occurrences = _service().list_by_equipment_year(equipment_id, year)
    return jsonify({"data": [occurrence.to_dict() for occurrence in occurrences]})


@bp.route("/occurrences/<occurrence_id>/complete", methods=["POST"])
@login_required
def complete(occurrence_id: str):
    form = CompletionForm()
    if not form.validate_on_submit():
        return _form_errors(form)
    completed_by = (form.completed_by.data or "").strip() or current_user.full_name
    occurrence = _service().complete(
        occurrence_id,
        completed_by,
        completed_date=form.completed_date.data,
        notes=form.notes.data or None,
    )
    return jsonify({"data": occurrence.to_dict()})


@bp.route("/occurrences/<occurrence_id>/pending", methods=["POST"])
@login_required
def uncomplete(occurrence_id: str):
    occurrence = _service().uncomplete(occurrence_id)
    return jsonify({"data": occurrence.to_dict()})


@bp.route("/occurrences/<occurrence_id>/reschedule", methods=["POST"])
@login_required
def reschedule(occurrence_id: str):
    form = RescheduleForm()
    if not form.validate_on_submit():
        return _form_errors(form)
    occurrence = _service().reschedule(occurrence_id, form.scheduled_date.data)
    return jsonify({"data": occurrence.to_dict()})


@bp.route("/occurrences/<occurrence_id>/delete", methods=["POST"])
@login_required
def delete(occurrence_id: str):
    if not current_user.is_admin:
        return jsonify({"error": "Only administrators can delete occurrences"}), 403
    _service().delete(occurrence_id)
    return jsonify({"deleted": 1})


@bp.route("/equipment/<equipment_id>/delete", methods=["POST"])
@login_required
def delete_equipment(equipment_id: str):
    if not current_user.is_admin:
        return jsonify({"error": "Only administrators can delete equipment"}), 403
    deleted = _service().delete_equipment(equipment_id)
    current_app.logger.warning(
        "%s deleted equipment %s and %d occurrences", current_user.username, equipment_id, deleted
    )
    return jsonify({"deleted": deleted})
