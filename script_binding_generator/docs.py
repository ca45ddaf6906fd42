"""
@copydoc resolution and XML documentation comments
"""

import textwrap

from .code_writer import CodeBlock
from .constants import DOC_COLUMN_LENGTH
from .model import CommentEntry

COMMENT_PREFIX = "/// "


class DocumentationResolver:
    """Resolves @copydoc references against the documentation index in the context"""

    def __init__(self, context):
        self.context = context
        self.diagnostics = context.diagnostics

    def _not_found(self, text: str) -> None:
        self.diagnostics.warning(f'Cannot find identifier referenced by the @copydoc command: "{text}".', text)
        return None

    def parse_copydoc(self, text: str, current_ns: list[str]) -> CommentEntry | None:
        """Find the comment a @copydoc argument refers to

        The reference is first treated as relative to current_ns, then as
        absolute. An optional parameter list selects a function overload by
        textual equality; an empty list selects the first overload.

        Returns:
            The referenced comment, or None if it could not be found
        """
        text = text.strip()
        has_params = "(" in text
        if has_params:
            full_name, params = text.split("(", 1)
            full_name = full_name.strip()
            params = params.strip(") \t\n\v\f\r")
        else:
            full_name, params = text, ""

        segments = [segment for segment in full_name.split("::") if segment] or [full_name]

        lookup = None
        namespace_start = 1
        if len(segments) > 1:
            lookup = self.context.comment_lookup.get(f"{segments[-2]}::{segments[-1]}")
            namespace_start = 2
        if lookup is None:
            lookup = self.context.comment_lookup.get(segments[-1])
            namespace_start = 1
        if lookup is None:
            return self._not_found(text)

        copydoc_ns = segments[:len(segments) - namespace_start]
        candidates = [self.context.comment_infos[idx] for idx in lookup]

        match = None
        for namespaces in (list(current_ns) + copydoc_ns, copydoc_ns):
            match = next((info for info in candidates if info.namespaces == namespaces), None)
            if match is not None:
                break

        if match is None:
            return self._not_found(text)

        if not has_params:
            return match.overloads[0].comment if match.is_function else match.comment

        if not match.is_function:
            return self._not_found(text)

        param_types = [param.strip() for param in params.split(",") if param.strip()]
        for overload in match.overloads:
            if overload.params == param_types:
                return overload.comment

        if not param_types and match.overloads:
            return match.overloads[0].comment
        return self._not_found(text)

    def resolve(self, comment: CommentEntry, current_ns: list[str]) -> CommentEntry:
        """Follow @copydoc references until a terminal comment is reached

        Unresolved references and reference cycles produce an empty comment.
        """
        visited = set()
        while True:
            target = comment.copydoc_target()
            if not target:
                return comment

            if target in visited:
                self.diagnostics.warning(f'Cyclic @copydoc reference: "{target}".', target)
                return CommentEntry()
            visited.add(target)

            resolved = self.parse_copydoc(target, current_ns)
            if resolved is None:
                return CommentEntry()
            comment = resolved


def _wrap(text: str, indent_level: int) -> list[str]:
    width = DOC_COLUMN_LENGTH - indent_level - len(COMMENT_PREFIX)
    lines = textwrap.wrap(text, width=max(width, 1), break_long_words=True, break_on_hyphens=False)
    return [COMMENT_PREFIX + line for line in lines] or [COMMENT_PREFIX.rstrip()]


def _paragraphs(block: CodeBlock, paragraphs: list[str], indent_level: int):
    for idx, paragraph in enumerate(paragraphs):
        if idx > 0:
            block.line("///")
        for line in _wrap(paragraph, indent_level):
            block.line(line)


def xml_comments(entry: CommentEntry, indent_level: int = 0) -> CodeBlock:
    """Render a comment as C# XML documentation

    Args:
        entry: Resolved comment
        indent_level: Tab depth the block is emitted at, used for wrapping
    """
    block = CodeBlock()
    if entry.brief:
        block.line("/// <summary>")
        _paragraphs(block, entry.brief, indent_level)
        block.line("/// </summary>")
    else:
        block.line("/// <summary></summary>")

    for param in entry.params:
        if not param.comments:
            continue
        block.line(f'/// <param name="{param.name}">')
        _paragraphs(block, param.comments, indent_level)
        block.line("/// </param>")

    if entry.returns:
        block.line("/// <returns>")
        _paragraphs(block, entry.returns, indent_level)
        block.line("/// </returns>")

    return block
