"""Best-effort device classification from a client-supplied User-Agent.

The header is free text controlled by the client; the result is metadata
for session listings only and must never be used for access decisions.
"""

from user_agents import parse as parse_user_agent  # type: ignore[import-untyped]

from school_auth.domain.enums import DeviceType


def detect_device_type(user_agent: str | None) -> DeviceType:
    """Classify a User-Agent as mobile, tablet, desktop or unknown.

    Tablets are checked first: the parser reports most iPads and Android
    tablets as mobile too.
    """
    if not user_agent or not user_agent.strip():
        return DeviceType.UNKNOWN
    ua = parse_user_agent(user_agent)
    if ua.is_tablet:
        return DeviceType.TABLET
    if ua.is_mobile:
        return DeviceType.MOBILE
    if ua.is_pc:
        return DeviceType.DESKTOP
    return DeviceType.UNKNOWN
