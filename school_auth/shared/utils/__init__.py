"""Shared utilities: UTC datetimes, id/code generation, masking, user-agent parsing."""

from school_auth.shared.utils.datetime import ensure_utc, to_epoch_micros, utc_now
from school_auth.shared.utils.generators import generate_cuid, generate_otp
from school_auth.shared.utils.masking import mask_email, mask_phone_number
from school_auth.shared.utils.user_agent import detect_device_type

__all__ = [
    "detect_device_type",
    "ensure_utc",
    "to_epoch_micros",
    "generate_cuid",
    "generate_otp",
    "mask_email",
    "mask_phone_number",
    "utc_now",
]
