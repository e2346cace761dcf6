"""Tool registry - maps tool names from parsed calls to handlers.

The parser accepts any tag name; deciding which names mean something, and
which arguments they need, happens here at the executor boundary.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from taskflow_core.agent.parser import ToolCall

if TYPE_CHECKING:
    from taskflow_core.agent.dispatcher import ToolInvocation

ToolHandler = Callable[["ToolInvocation"], str]


class ToolError(Exception):
    """Raised when a tool call cannot be matched to a usable tool."""

    pass


class UnknownToolError(ToolError):
    """Raised when no tool is registered under the call's name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class MissingArgumentError(ToolError):
    """Raised when a call lacks arguments its tool requires."""

    def __init__(self, name: str, missing: list[str]):
        self.name = name
        self.missing = missing
        super().__init__(f"Tool '{name}' is missing required argument(s): {', '.join(missing)}")


@dataclass(frozen=True)
class ToolSpec:
    """A registered tool.

    Attributes:
        name: Tag name the model uses
        handler: Callable run with a ToolInvocation, returns a result message
        required_args: Arguments that must be present
        path_args: Arguments holding paths; validated against the sandbox
        destructive: If True, every path argument is backed up before the
            handler runs (overwrite, delete, move)
        description: Human-readable summary, e.g. for prompts
    """

    name: str
    handler: ToolHandler
    required_args: tuple[str, ...] = ()
    path_args: tuple[str, ...] = ()
    destructive: bool = False
    description: str = ""


@dataclass
class ToolRegistry:
    """Caller-owned set of tools.

    Example:
        registry = ToolRegistry()

        @registry.tool("write_file", required_args=["path", "content"],
                       path_args=["path"], destructive=True)
        def write_file(invocation):
            Path(invocation.paths["path"]).write_text(invocation.call.arguments["content"])
            return "ok"
    """

    _tools: dict[str, ToolSpec] = field(default_factory=dict)

    def register(
        self,
        name: str,
        handler: ToolHandler,
        *,
        required_args: Iterable[str] = (),
        path_args: Iterable[str] = (),
        destructive: bool = False,
        description: str = "",
    ) -> ToolSpec:
        """Register a handler under name.

        Raises:
            ValueError: If name is already registered
        """
        name = name.lower()
        if name in self._tools:
            raise ValueError(f"Tool already registered: {name}")

        spec = ToolSpec(
            name=name,
            handler=handler,
            required_args=tuple(required_args),
            path_args=tuple(path_args),
            destructive=destructive,
            description=description,
        )
        self._tools[name] = spec
        return spec

    def tool(self, name: str, **options) -> Callable[[ToolHandler], ToolHandler]:
        """Decorator form of register()."""

        def decorator(handler: ToolHandler) -> ToolHandler:
            self.register(name, handler, **options)
            return handler

        return decorator

    def get(self, name: str) -> Optional[ToolSpec]:
        return self._tools.get(name.lower())

    def names(self) -> list[str]:
        return sorted(self._tools)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def validate(self, call: ToolCall) -> ToolSpec:
        """Return the tool for call, checking its required arguments.

        Raises:
            UnknownToolError: If call.name is not registered
            MissingArgumentError: If required arguments are absent
        """
        spec = self.get(call.name)
        if spec is None:
            raise UnknownToolError(call.name)

        missing = [arg for arg in spec.required_args if arg not in call.arguments]
        if missing:
            raise MissingArgumentError(call.name, missing)

        return spec
