"""
carejourney/utils/constants.py

Purpose: Centralized constants

- Upload rules
- Schedule option values
- Profile option values
- Validation thresholds and user-facing messages
"""

# ============================================
# UPLOADS
# ============================================

ALLOWED_IMAGE_MIME_TYPES = ("image/jpeg", "image/pjpeg", "image/png", "image/webp")

INVALID_FILE_TYPE_MESSAGE = "Invalid file type. Only JPG, PNG, and WEBP files are allowed."

# Object key prefixes, one per upload kind: <userId>/<kind>-<epoch ms>
UPLOAD_KIND_PROFILE = "profile"
UPLOAD_KIND_POST = "post"
UPLOAD_KIND_MEDICATION = "medication"
UPLOAD_KIND_FILE = "file"


# ============================================
# SCHEDULES
# ============================================

SCHEDULE_APPOINTMENTS = "appointments"
SCHEDULE_MEDICATIONS = "medications"
SCHEDULE_NAMES = (SCHEDULE_APPOINTMENTS, SCHEDULE_MEDICATIONS)

REMINDER_OPTIONS = (
    "No Reminder",
    "1 hour before",
    "2 hours before",
    "The day before",
)
DEFAULT_REMINDER = "No Reminder"

FREQUENCY_AS_NEEDED = "As needed"
FREQUENCY_EVERY_DAY = "Every day"
FREQUENCY_SPECIFIC_DAYS = "Specific days"
FREQUENCY_OPTIONS = (FREQUENCY_AS_NEEDED, FREQUENCY_EVERY_DAY, FREQUENCY_SPECIFIC_DAYS)

TIMES_PER_DAY_OPTIONS = ("Once a day",) + tuple(f"{n} times a day" for n in range(2, 11))
DEFAULT_TIMES_PER_DAY = "Once a day"

WEEKDAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


# ============================================
# PROFILES
# ============================================

USER_TYPES = ("patient", "caregiver", "supporter")
DEFAULT_USER_TYPE = "patient"

GENDERS = ("Male", "Female", "Other")

DEFAULT_CANCER_TYPE = "other"


# ============================================
# VALIDATION THRESHOLDS
# ============================================

NAME_MIN_LENGTH = 1
NAME_MAX_LENGTH = 20
PASSWORD_MIN_LENGTH = 8
POST_DESCRIPTION_MIN_LENGTH = 10
REPORT_DESCRIPTION_MIN_LENGTH = 15
LOCATION_MIN_LENGTH = 3
FOLDER_NAME_MAX_LENGTH = 30

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Newest first; _id breaks ties between documents created in the same millisecond
NEWEST_FIRST = [("createdAt", -1), ("_id", -1)]


# ============================================
# MESSAGES
# ============================================

UNAUTHORIZED_REQUEST = "Unauthorized request"
INVALID_RESET_REQUEST = "Unauthorized access, Invalid Request !"
