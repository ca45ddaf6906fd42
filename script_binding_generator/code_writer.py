"""
Structured statement lists with explicit indentation tracking
"""

from contextlib import contextmanager


class CodeBlock:
    """Ordered list of (indent level, text) statements

    Levels are relative to the block; nesting one block into another with
    extend() shifts its lines by the current level. Whitespace is only
    produced by render().
    """

    def __init__(self):
        self.lines: list[tuple[int, str]] = []
        self._level = 0

    def line(self, text: str = "") -> "CodeBlock":
        if text:
            self.lines.append((self._level, text))
        else:
            self.lines.append((0, ""))
        return self

    def blank(self) -> "CodeBlock":
        return self.line()

    @contextmanager
    def indented(self, levels: int = 1):
        self._level += levels
        try:
            yield self
        finally:
            self._level -= levels

    @contextmanager
    def braces(self, header: str = None, closing: str = "}"):
        """Write an optional header, then a braced and indented body"""
        if header is not None:
            self.line(header)
        self.line("{")
        with self.indented():
            yield self
        self.line(closing)

    def extend(self, other: "CodeBlock") -> "CodeBlock":
        for level, text in other.lines:
            if text:
                self.lines.append((self._level + level, text))
            else:
                self.lines.append((0, ""))
        return self

    def texts(self) -> list[str]:
        """Statement texts without indentation"""
        return [text for _, text in self.lines]

    def render(self, indent: str = "\t", base_level: int = 0) -> str:
        output = []
        for level, text in self.lines:
            if text:
                output.append(indent * (base_level + level) + text + "\n")
            else:
                output.append("\n")
        return "".join(output)

    def __bool__(self):
        return bool(self.lines)

    def __len__(self):
        return len(self.lines)

    def __str__(self):
        return self.render()
