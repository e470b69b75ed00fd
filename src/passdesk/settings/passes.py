"""Credential allocation and badge rendering settings."""

from decouple import config

# Pass ids look like f"{PASS_ID_PREFIX}{number}", e.g. PASS-1001
PASS_ID_PREFIX = config("PASS_ID_PREFIX", default="PASS-")
PASS_NUMBER_START = config("PASS_NUMBER_START", default=1001, cast=int)
PASS_ALLOCATION_MAX_ATTEMPTS = config("PASS_ALLOCATION_MAX_ATTEMPTS", default=5, cast=int)

BADGE_HEADER_IMAGE = config("BADGE_HEADER_IMAGE", default="")
BADGE_HEADER_CAPTION = config("BADGE_HEADER_CAPTION", default="YOU ARE INVITED")
BADGE_HEADER_SUBCAPTION = config("BADGE_HEADER_SUBCAPTION", default="")
BADGE_LABEL = config("BADGE_LABEL", default="VISITOR")
BADGE_FONT_PATH = config("BADGE_FONT_PATH", default="")
BADGE_BOLD_FONT_PATH = config("BADGE_BOLD_FONT_PATH", default="")
BADGE_DPI = config("BADGE_DPI", default=216, cast=int)
