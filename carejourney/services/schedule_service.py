"""
carejourney/services/schedule_service.py

Purpose: Personal schedules

- Appointments (title, location, date, reminder)
- Medications (frequency rules, optional photo)
- Owner-scoped listing, partial updates and deletes
"""

from typing import Any, Dict, List, Optional

from bson import ObjectId

from carejourney.core.exceptions import ResourceNotFoundError, ValidationError
from carejourney.core.logging import get_logger
from carejourney.db.mongo import get_appointments_collection, get_medications_collection
from carejourney.services.storage_service import StorageService, discard_object
from carejourney.utils.constants import (
    DEFAULT_TIMES_PER_DAY,
    FREQUENCY_AS_NEEDED,
    FREQUENCY_SPECIFIC_DAYS,
    NEWEST_FIRST,
    SCHEDULE_APPOINTMENTS,
    SCHEDULE_MEDICATIONS,
)
from carejourney.utils.time_utils import utcnow

logger = get_logger(__name__)


def _collection(schedule_name: str):
    if schedule_name == SCHEDULE_APPOINTMENTS:
        return get_appointments_collection()
    if schedule_name == SCHEDULE_MEDICATIONS:
        return get_medications_collection()
    raise ValidationError("Invalid schedule name!")


def _label(schedule_name: str) -> str:
    # "appointments" -> "Appointment"
    return schedule_name[:-1].capitalize()


def apply_frequency_rules(medication: Dict[str, Any]) -> Dict[str, Any]:
    """
    Normalizes a (merged) medication record:

    - "As needed" carries neither times per day nor specific days
    - "Specific days" needs at least one selected day
    - other frequencies drop specific days and default times per day
    """
    frequency = medication.get("frequency") or FREQUENCY_AS_NEEDED
    medication["frequency"] = frequency

    if frequency == FREQUENCY_AS_NEEDED:
        medication["timesPerDay"] = None
        medication["specificDays"] = []
        return medication

    if frequency == FREQUENCY_SPECIFIC_DAYS:
        if not medication.get("specificDays"):
            raise ValidationError("Please select specific days!")
    else:
        medication["specificDays"] = []

    medication["timesPerDay"] = medication.get("timesPerDay") or DEFAULT_TIMES_PER_DAY
    return medication


async def create_appointment(owner_id: ObjectId, fields: Dict[str, Any]) -> Dict[str, Any]:
    appointment = dict(fields, owner=owner_id, createdAt=utcnow())
    result = await get_appointments_collection().insert_one(appointment)
    appointment["_id"] = result.inserted_id

    logger.info(
        "Appointment created",
        extra={"user_id": str(owner_id), "schedule_id": str(appointment["_id"])}
    )
    return appointment


async def create_medication(
    owner_id: ObjectId,
    fields: Dict[str, Any],
    photo: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    medication = apply_frequency_rules(dict(fields))
    medication.update(owner=owner_id, photo=photo, createdAt=utcnow())
    medication.setdefault("date", utcnow())

    result = await get_medications_collection().insert_one(medication)
    medication["_id"] = result.inserted_id

    logger.info(
        "Medication created",
        extra={"user_id": str(owner_id), "schedule_id": str(medication["_id"])}
    )
    return medication


async def list_schedules(owner_id: ObjectId, schedule_name: str) -> List[Dict[str, Any]]:
    """
    Appointments sorted by date, medications newest first.
    """
    collection = _collection(schedule_name)
    if schedule_name == SCHEDULE_APPOINTMENTS:
        cursor = collection.find({"owner": owner_id}).sort("date", 1)
    else:
        cursor = collection.find({"owner": owner_id}).sort(NEWEST_FIRST)
    return await cursor.to_list(length=None)


async def require_schedule(owner_id: ObjectId, schedule_id: ObjectId, schedule_name: str) -> Dict[str, Any]:
    item = await _collection(schedule_name).find_one({"_id": schedule_id, "owner": owner_id})
    if not item:
        raise ResourceNotFoundError(f"{_label(schedule_name)} not found!")
    return item


async def update_appointment(
    owner_id: ObjectId,
    schedule_id: ObjectId,
    changes: Dict[str, Any]
) -> Dict[str, Any]:
    appointment = await require_schedule(owner_id, schedule_id, SCHEDULE_APPOINTMENTS)
    if changes:
        await get_appointments_collection().update_one({"_id": schedule_id}, {"$set": changes})
        appointment.update(changes)

    logger.info("Appointment updated", extra={"schedule_id": str(schedule_id)})
    return appointment


async def update_medication(
    owner_id: ObjectId,
    schedule_id: ObjectId,
    changes: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Partial update; frequency rules are checked on the merged record.
    """
    medication = await require_schedule(owner_id, schedule_id, SCHEDULE_MEDICATIONS)
    medication.update(changes)
    medication = apply_frequency_rules(medication)

    updated = {
        key: medication.get(key)
        for key in set(changes) | {"frequency", "timesPerDay", "specificDays"}
    }
    await get_medications_collection().update_one({"_id": schedule_id}, {"$set": updated})

    logger.info("Medication updated", extra={"schedule_id": str(schedule_id)})
    return medication


async def delete_schedule(
    owner_id: ObjectId,
    schedule_id: ObjectId,
    schedule_name: str,
    storage: StorageService
) -> None:
    """
    Deletes an appointment or medication (and a medication's photo object).
    """
    item = await require_schedule(owner_id, schedule_id, schedule_name)

    await _collection(schedule_name).delete_one({"_id": schedule_id})
    await discard_object(storage, (item.get("photo") or {}).get("publicId"))
    logger.info(f"{_label(schedule_name)} deleted", extra={"schedule_id": str(schedule_id)})
