from flask import Blueprint, request
from medicare.schemas.reminders import CreateReminderRequest
from medicare.services.storefront import current_storefront
from medicare.utils import ok, validate_schema
from medicare.version import API_PREFIX
from medicare.views import render_reminder, render_reminders

reminder_bp = Blueprint("reminders", __name__, url_prefix=f"{API_PREFIX}/reminders")


@reminder_bp.route("", methods=["GET"])
def list_reminders():
    return ok(render_reminders(current_storefront().reminders))


@reminder_bp.route("", methods=["POST"])
@validate_schema(CreateReminderRequest)
def create_reminder():
    data = request.validated_data
    scheduler = current_storefront().reminders
    reminder = scheduler.create(
        data.medicine_name,
        data.dosage,
        data.frequency,
        data.time,
        duration_days=data.duration_days,
        instructions=data.instructions,
    )
    return ok(render_reminder(reminder, scheduler.schedule_for(reminder)), message="Reminder set successfully!", status=201)


@reminder_bp.route("/<reminder_id>", methods=["DELETE"])
def delete_reminder(reminder_id):
    scheduler = current_storefront().reminders
    scheduler.delete(reminder_id)
    return ok(render_reminders(scheduler), message="Reminder deleted successfully!")
