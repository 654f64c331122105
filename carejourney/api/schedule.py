"""
carejourney/api/schedule.py

Purpose: Appointment and medication endpoints

- JSON appointments, multipart medications (optional photo)
- Owner-scoped listing, partial updates and deletes
"""

from typing import Optional

from fastapi import APIRouter, File, Form, Query, UploadFile
from pydantic import ValidationError as PydanticValidationError

from carejourney.api.deps import AuthContext, CurrentAuth, Storage
from carejourney.api.uploads import store_image
from carejourney.core.exceptions import ValidationError
from carejourney.schemas.schedule import (
    AppointmentRequest,
    AppointmentUpdateRequest,
    MedicationUpdateRequest,
)
from carejourney.services import schedule_service
from carejourney.services.storage_service import StorageService
from carejourney.utils.bson_utils import to_json_compatible
from carejourney.utils.constants import (
    FREQUENCY_AS_NEEDED,
    SCHEDULE_NAMES,
    UPLOAD_KIND_MEDICATION,
)
from carejourney.utils.validation_utils import parse_object_id, parse_string_list

router = APIRouter()


@router.post("/add-appointment", status_code=201)
async def add_appointment(body: AppointmentRequest, auth: AuthContext = CurrentAuth):
    appointment = await schedule_service.create_appointment(auth.user_id, body.model_dump())
    return to_json_compatible({"success": True, "appointment": appointment})


@router.post("/add-medication", status_code=201)
async def add_medication(
    name: str = Form(""),
    frequency: str = Form(FREQUENCY_AS_NEEDED),
    timesPerDay: Optional[str] = Form(None),
    specificDays: Optional[str] = Form(None),
    prescriber: str = Form(""),
    notes: str = Form(""),
    date: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    auth: AuthContext = CurrentAuth,
    storage: StorageService = Storage
):
    """
    Multipart medication form; specificDays arrives as a JSON encoded list.
    """
    try:
        fields = MedicationUpdateRequest(
            name=name,
            frequency=frequency,
            timesPerDay=timesPerDay,
            specificDays=parse_string_list(specificDays),
            prescriber=prescriber,
            notes=notes,
            date=date or None,
        )
    except PydanticValidationError as e:
        errors = e.errors()
        message = str(errors[0]["msg"]).removeprefix("Value error, ") if errors else "Invalid medication!"
        raise ValidationError(message)

    medication = fields.model_dump(exclude_none=True)
    # Checked before the photo is stored so a rejected form leaves no object behind
    schedule_service.apply_frequency_rules(dict(medication))

    photo = await store_image(file, auth.user_id, UPLOAD_KIND_MEDICATION, storage)
    medication = await schedule_service.create_medication(auth.user_id, medication, photo)
    return to_json_compatible({"success": True, "medication": medication})


@router.get("/{scheduleName}")
async def get_schedules(scheduleName: str, auth: AuthContext = CurrentAuth):
    if scheduleName not in SCHEDULE_NAMES:
        raise ValidationError("Invalid schedule name!")
    items = await schedule_service.list_schedules(auth.user_id, scheduleName)
    return to_json_compatible({scheduleName: items})


@router.patch("/appointment-update")
async def update_appointment(
    body: AppointmentUpdateRequest,
    scheduleId: str = Query(...),
    auth: AuthContext = CurrentAuth
):
    schedule_id = parse_object_id(scheduleId, "scheduleId")
    appointment = await schedule_service.update_appointment(
        auth.user_id,
        schedule_id,
        body.model_dump(exclude_none=True)
    )
    return to_json_compatible({"success": True, "appointment": appointment})


@router.patch("/medication-update")
async def update_medication(
    body: MedicationUpdateRequest,
    scheduleId: str = Query(...),
    auth: AuthContext = CurrentAuth
):
    schedule_id = parse_object_id(scheduleId, "scheduleId")
    medication = await schedule_service.update_medication(
        auth.user_id,
        schedule_id,
        body.model_dump(exclude_none=True)
    )
    return to_json_compatible({"success": True, "medication": medication})


@router.delete("/schedule-delete")
async def delete_schedule(
    scheduleId: str = Query(...),
    scheduleName: str = Query(...),
    auth: AuthContext = CurrentAuth,
    storage: StorageService = Storage
):
    if scheduleName not in SCHEDULE_NAMES:
        raise ValidationError("Invalid schedule name!")
    schedule_id = parse_object_id(scheduleId, "scheduleId")
    await schedule_service.delete_schedule(auth.user_id, schedule_id, scheduleName, storage)
    return {"success": True}
