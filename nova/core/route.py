from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class RouteObject:
    """Where a request is routed: module, controller, action and params."""

    module: str = ""
    controller: str = ""
    action: str = ""
    params: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return "/".join(part for part in (self.module, self.controller, self.action) if part)
