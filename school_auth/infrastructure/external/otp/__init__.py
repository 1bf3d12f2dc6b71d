"""OTP delivery channels."""

from school_auth.infrastructure.external.otp.email_sender import EmailOtpSender
from school_auth.infrastructure.external.otp.factory import create_otp_sender
from school_auth.infrastructure.external.otp.log_sender import LogOnlyOtpSender
from school_auth.infrastructure.external.otp.sms_sender import SmsOtpSender

__all__ = ["EmailOtpSender", "LogOnlyOtpSender", "SmsOtpSender", "create_otp_sender"]
