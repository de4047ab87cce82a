from typing import Mapping, NamedTuple, Optional


class HttpResponse(NamedTuple):
    """Response from HTTP fetch operation."""
    status_code: int
    content: bytes
    headers: Optional[Mapping[str, str]] = None

    @property
    def ok(self) -> bool:
        return 200 <= int(self.status_code) < 300

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    def header(self, name: str) -> Optional[str]:
        if not self.headers:
            return None
        return self.headers.get(name)
