from html import escape
from typing import Any, List, Set


class VarDump:
    """Render values in a ``var_dump`` style, as text or as an HTML fragment."""

    INDENT = "  "

    def __init__(self, html_output: bool = False, max_depth: int = 10) -> None:
        self.html_output = html_output
        self.max_depth = max_depth

    def dump_type(self, value: Any) -> str:
        lines: List[str] = []
        self._render(value, 0, lines, set())
        text = "\n".join(lines)
        return escape(text) if self.html_output else text

    def _render(self, value: Any, depth: int, lines: List[str], seen: Set[int]) -> None:
        pad = self.INDENT * depth
        if value is None:
            lines.append(f"{pad}NULL")
        elif isinstance(value, bool):
            lines.append(f"{pad}bool({'true' if value else 'false'})")
        elif isinstance(value, int):
            lines.append(f"{pad}int({value})")
        elif isinstance(value, float):
            lines.append(f"{pad}float({value!r})")
        elif isinstance(value, str):
            lines.append(f'{pad}string({len(value)}) "{value}"')
        elif isinstance(value, bytes):
            lines.append(f"{pad}bytes({len(value)}) {value!r}")
        elif isinstance(value, (dict, list, tuple, set, frozenset)):
            self._render_container(value, depth, lines, seen)
        else:
            self._render_object(value, depth, lines, seen)

    def _render_container(self, value: Any, depth: int, lines: List[str], seen: Set[int]) -> None:
        pad = self.INDENT * depth
        name = type(value).__name__
        if id(value) in seen:
            lines.append(f"{pad}*RECURSION* {name}")
            return
        if depth >= self.max_depth:
            lines.append(f"{pad}{name}({len(value)}) {{...}}")
            return

        items = value.items() if isinstance(value, dict) else enumerate(value)
        lines.append(f"{pad}{name}({len(value)}) {{")
        seen.add(id(value))
        for key, item in items:
            lines.append(f"{pad}{self.INDENT}[{key!r}] =>")
            self._render(item, depth + 1, lines, seen)
        seen.discard(id(value))
        lines.append(f"{pad}}}")

    def _render_object(self, value: Any, depth: int, lines: List[str], seen: Set[int]) -> None:
        pad = self.INDENT * depth
        name = type(value).__qualname__
        attrs = getattr(value, "__dict__", None)
        if not attrs:
            lines.append(f"{pad}object({name}) {value!r}")
            return
        if id(value) in seen:
            lines.append(f"{pad}*RECURSION* object({name})")
            return
        if depth >= self.max_depth:
            lines.append(f"{pad}object({name}) {{...}}")
            return

        lines.append(f"{pad}object({name}) {{")
        seen.add(id(value))
        for attr, item in attrs.items():
            lines.append(f'{pad}{self.INDENT}["{attr}"] =>')
            self._render(item, depth + 1, lines, seen)
        seen.discard(id(value))
        lines.append(f"{pad}}}")
