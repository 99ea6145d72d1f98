# backend/app/core/constants.py
"""Platform-wide constants."""

BRAND_NAME = "VanCastro Driving School"

API_TITLE = f"{BRAND_NAME} API"
API_VERSION = "1.0.0"
API_DESCRIPTION = "Lesson booking, availability and account endpoints."

ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "https://vancastro.vercel.app",
]

# Week order used by the admin availability screens
DAYS_OF_WEEK = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

# Lesson locations served by the school
LOCATION_VANCOUVER = "Vancouver"
LOCATION_NORTH_VANCOUVER = "North Vancouver"
LOCATION_BURNABY = "Burnaby"
LOCATION_SURREY = "Surrey"

OTP_PURPOSE_REGISTRATION = "registration"
OTP_PURPOSE_PASSWORD_RESET = "password-reset"
OTP_PURPOSES = (OTP_PURPOSE_REGISTRATION, OTP_PURPOSE_PASSWORD_RESET)
OTP_CODE_LENGTH = 6

# Prefix the login UI parses to show the reset date
LIMIT_EXCEEDED_PREFIX = "LIMIT_EXCEEDED"
