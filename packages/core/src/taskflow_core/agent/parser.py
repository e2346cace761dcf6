"""Tool call extraction from LLM output.

The model is prompted to express file actions as XML-style tags:

    <write_file path="src/index.ts">
    export const answer = 42;
    </write_file>

    <read_file path="README.md" />

ToolParser recovers an ordered list of ToolCall records from that text. The
grammar is deliberately forgiving: malformed fragments are skipped and never
raise, so one broken tag does not cost the well-formed calls around it.

Known limitations:
- Attribute values cannot contain `"` or `>` (no escape processing).
- Same-named tags cannot nest; the first matching closer ends the tag.
- Unterminated tags are ignored.
"""

import logging
import re
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from taskflow_core.config import DEFAULT_BODY_ARGUMENTS

logger = logging.getLogger(__name__)

# <name attrs>body</name> or <name attrs/>. The attribute group must start with
# whitespace so a tag name is never split, and the self-closing alternative is
# tried first so `<tool a="1" />` never pairs with a later `</tool>`.
TAG_PATTERN = re.compile(
    r"<([a-z_]+)(\s[^>]*?)?(?:\s*/>|>(.*?)</\1>)",
    re.IGNORECASE | re.DOTALL | re.ASCII,
)

ATTRIBUTE_PATTERN = re.compile(r'([a-z_]+)="([^"]*)"', re.IGNORECASE | re.ASCII)


class ToolCall(BaseModel):
    """A single tool invocation requested by the model.

    The name is not checked against any known tool set here; that belongs to
    whoever executes the call (see ToolRegistry).
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="Lowercase tool name")
    arguments: dict[str, str] = Field(
        default_factory=dict, description="Attribute arguments in source order"
    )

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Return an argument value or default."""
        return self.arguments.get(key, default)


class ToolParser:
    """Extract ToolCall records from free-form LLM text.

    Example:
        parser = ToolParser()
        calls = parser.parse('<write_file path="a.txt">hello</write_file>')
        # [ToolCall(name="write_file", arguments={"path": "a.txt", "content": "hello"})]

    Args:
        body_arguments: Mapping of tool name to the argument that receives the
            tag's inner text when that argument was not given as an attribute.
            Defaults to {"write_file": "content"}.
    """

    def __init__(self, body_arguments: Optional[Mapping[str, str]] = None):
        if body_arguments is None:
            body_arguments = DEFAULT_BODY_ARGUMENTS
        self.body_arguments = {name.lower(): arg for name, arg in body_arguments.items()}

    def parse(self, text: str) -> list[ToolCall]:
        """Parse every recognizable tool tag in text, in order of appearance.

        Never raises for string input; text without tags yields an empty list.
        """
        calls = []

        for match in TAG_PATTERN.finditer(text):
            name = match.group(1).lower()
            arguments = self.parse_attributes(match.group(2) or "")

            body_arg = self.body_arguments.get(name)
            body = (match.group(3) or "").strip()
            if body_arg and body_arg not in arguments and body:
                arguments[body_arg] = body

            calls.append(ToolCall(name=name, arguments=arguments))

        logger.debug(f"[ToolParser] Extracted {len(calls)} tool call(s)")
        return calls

    @staticmethod
    def parse_attributes(attributes: str) -> dict[str, str]:
        """Parse key="value" pairs. Later duplicates win; empty values are skipped."""
        arguments: dict[str, str] = {}
        for key, value in ATTRIBUTE_PATTERN.findall(attributes):
            if value:
                arguments[key.lower()] = value
        return arguments


_default_parser = ToolParser()


def parse_tool_calls(text: str) -> list[ToolCall]:
    """Parse text with the default ToolParser."""
    return _default_parser.parse(text)
