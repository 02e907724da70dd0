"""Remote repository coordinates resolved from the origin URL."""

from pydantic import BaseModel

DEFAULT_HOST = "github.com"


class RemoteRepository(BaseModel):
    """Host, owner/name path and scheme of the origin remote.

    ``host`` is None for the default public host; any other value selects
    the enterprise API layout (``/api/v3``) with TLS verification relaxed.
    """

    host: str | None = None
    repository: str
    scheme: str = "https"

    @property
    def is_enterprise(self) -> bool:
        return self.host is not None

    @property
    def api_url(self) -> str:
        if self.host is None:
            return "https://api.github.com"
        return f"{self.scheme}://{self.host}/api/v3"

    @property
    def web_url(self) -> str:
        return f"{self.scheme}://{self.host or DEFAULT_HOST}"

    @property
    def verify_ssl(self) -> bool:
        return self.host is None
