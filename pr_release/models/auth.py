"""Device authorization grant returned by the code-hosting platform."""

from pydantic import BaseModel


class DeviceCode(BaseModel):
    """Codes for one device-flow login.

    The user enters ``user_code`` at ``verification_uri``; meanwhile the
    client polls with ``device_code`` every ``interval`` seconds until the
    grant expires after ``expires_in`` seconds.
    """

    device_code: str
    user_code: str
    verification_uri: str
    expires_in: int = 900
    interval: int = 5
