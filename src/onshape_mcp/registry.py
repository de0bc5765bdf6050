"""Operation registry and dispatcher for MCP tools and resources.

Tool and resource handlers are registered once at startup through the
OperationRegistry decorators, which mirror FastMCP's ``@mcp.tool()`` and
``@mcp.resource()``. The registry is then frozen into an OperationTable,
an immutable name-to-descriptor mapping that the server holds by reference.

Every call dispatched through the table ends in an OperationResult. Schema
violations, unknown names, malformed resource URIs, and handler exceptions
are all reported in-band with ``is_error`` set; nothing escapes to the
protocol layer.
"""

import inspect
import logging
import typing
from collections.abc import Awaitable, Callable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, create_model
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from onshape_mcp.errors import (
    AddressError,
    DuplicateOperationError,
    UnknownOperationError,
    ValidationError,
)
from onshape_mcp.locator import URI_TEMPLATES, AddressLevel, parse_uri

logger = logging.getLogger(__name__)

Handler = Callable[..., Awaitable[str]]


class OperationKind(str, Enum):
    """Kind of registered operation."""

    TOOL = "tool"
    RESOURCE = "resource"


class CallState(str, Enum):
    """Lifecycle of one dispatched call."""

    RECEIVED = "received"
    VALIDATED = "validated"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    RESPONDED = "responded"


@dataclass(frozen=True)
class OperationDescriptor:
    """A registered tool or resource.

    Attributes:
        name: Unique operation name.
        kind: Tool or resource.
        input_model: Pydantic model validating tool arguments (None for resources).
        handler: Async callable producing the text response.
        description: Human-readable description shown to clients.
        level: Address level served (resources only).
    """

    name: str
    kind: OperationKind
    input_model: type[BaseModel] | None
    handler: Handler
    description: str = ""
    level: AddressLevel | None = None

    @property
    def input_schema(self) -> dict[str, Any]:
        """JSON schema of the tool arguments, using their camelCase names."""
        if self.input_model is None:
            return {"type": "object", "properties": {}}
        return self.input_model.model_json_schema(by_alias=True)

    @property
    def uri_template(self) -> str | None:
        """Resource URI template (resources only)."""
        return URI_TEMPLATES[self.level] if self.level is not None else None


@dataclass
class OperationResult:
    """In-band response to a dispatched call.

    Attributes:
        content: Text blocks of the response.
        is_error: Whether the call failed.
        outcome: Terminal state reached before responding.
    """

    content: list[str] = field(default_factory=list)
    is_error: bool = False
    outcome: CallState = CallState.SUCCEEDED

    @property
    def text(self) -> str:
        """All content blocks joined together."""
        return "\n".join(self.content)


_MODEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _build_input_model(name: str, func: Handler) -> type[BaseModel]:
    """Derive an argument model from a handler signature.

    Parameters are exposed to clients under their camelCase alias, so a
    handler parameter ``document_id`` is supplied as ``documentId``.
    """
    hints = typing.get_type_hints(func, include_extras=True)
    fields: dict[str, Any] = {}
    for param in inspect.signature(func).parameters.values():
        annotation = hints.get(param.name, Any)
        default = ... if param.default is inspect.Parameter.empty else param.default
        fields[param.name] = (annotation, default)
    model_name = "".join(part.title() for part in name.split("_")) + "Arguments"
    return create_model(model_name, __config__=_MODEL_CONFIG, **fields)


class OperationRegistry:
    """Collects operation descriptors during startup."""

    def __init__(self) -> None:
        self._operations: dict[str, OperationDescriptor] = {}
        self._frozen = False

    def register(self, descriptor: OperationDescriptor) -> None:
        """Add a descriptor.

        Raises:
            DuplicateOperationError: If the name is already registered.
            RuntimeError: If the registry has been frozen.
        """
        if self._frozen:
            msg = "Operation registry is frozen"
            raise RuntimeError(msg)
        if descriptor.name in self._operations:
            msg = f"Operation already registered: {descriptor.name}"
            raise DuplicateOperationError(msg)
        self._operations[descriptor.name] = descriptor
        logger.debug("Registered %s %s", descriptor.kind.value, descriptor.name)

    def tool(
        self, name: str | None = None, description: str | None = None
    ) -> Callable[[Handler], Handler]:
        """Decorator registering an async function as a tool.

        The tool name defaults to the function name and the description to
        its docstring. Arguments are validated against the signature.
        """

        def decorator(func: Handler) -> Handler:
            op_name = name or func.__name__
            self.register(
                OperationDescriptor(
                    name=op_name,
                    kind=OperationKind.TOOL,
                    input_model=_build_input_model(op_name, func),
                    handler=func,
                    description=description or inspect.getdoc(func) or "",
                )
            )
            return func

        return decorator

    def resource(
        self, level: AddressLevel, name: str | None = None
    ) -> Callable[[Handler], Handler]:
        """Decorator registering an async function as the resource for a level.

        The handler receives the parsed Address, never the raw URI.
        """

        def decorator(func: Handler) -> Handler:
            self.register(
                OperationDescriptor(
                    name=name or level.value,
                    kind=OperationKind.RESOURCE,
                    input_model=None,
                    handler=func,
                    description=inspect.getdoc(func) or "",
                    level=level,
                )
            )
            return func

        return decorator

    def freeze(self) -> "OperationTable":
        """Close registration and return the immutable operation table."""
        self._frozen = True
        return OperationTable(self._operations)


class OperationTable(Mapping[str, OperationDescriptor]):
    """Immutable table of registered operations with dispatch."""

    def __init__(self, operations: Mapping[str, OperationDescriptor]) -> None:
        self._operations = MappingProxyType(dict(operations))
        self._resources_by_level = MappingProxyType(
            {
                op.level: op
                for op in self._operations.values()
                if op.kind is OperationKind.RESOURCE and op.level is not None
            }
        )

    def __getitem__(self, name: str) -> OperationDescriptor:
        return self._operations[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def tools(self) -> list[OperationDescriptor]:
        """Registered tools in registration order."""
        return [op for op in self._operations.values() if op.kind is OperationKind.TOOL]

    def resources(self) -> list[OperationDescriptor]:
        """Registered resources in registration order."""
        return [
            op for op in self._operations.values() if op.kind is OperationKind.RESOURCE
        ]

    async def call_tool(
        self, name: str, arguments: dict[str, Any] | None = None
    ) -> OperationResult:
        """Validate arguments and run a tool, always returning a result.

        Args:
            name: Tool name.
            arguments: Raw argument object from the client.

        Returns:
            OperationResult; ``is_error`` is set on any failure.
        """
        _trace(name, CallState.RECEIVED)
        operation = self._operations.get(name)
        if operation is None or operation.input_model is None:
            error = UnknownOperationError(f"Unknown tool: {name}")
            logger.warning("%s", error)
            return _respond(name, CallState.FAILED, str(error))

        try:
            params = operation.input_model.model_validate(arguments or {})
        except PydanticValidationError as e:
            error = ValidationError(name, e.errors(include_url=False))
            logger.warning("%s", error)
            return _respond(name, CallState.FAILED, str(error))
        _trace(name, CallState.VALIDATED)

        kwargs = {key: getattr(params, key) for key in type(params).model_fields}
        return await self._execute(operation, kwargs)

    async def read_resource(self, uri: str) -> OperationResult:
        """Resolve a resource URI and run the matching handler.

        Args:
            uri: onshape:// resource URI.

        Returns:
            OperationResult; malformed URIs and handler failures set ``is_error``.
        """
        _trace(uri, CallState.RECEIVED)
        try:
            address = parse_uri(uri)
        except AddressError as e:
            logger.warning("Failed to parse resource URI %s: %s", uri, e)
            return _respond(uri, CallState.FAILED, f"Error reading {uri}: {e}")

        operation = self._resources_by_level.get(address.level)
        if operation is None:
            message = f"No resource registered for {address.level.value} URIs: {uri}"
            return _respond(uri, CallState.FAILED, message)
        _trace(uri, CallState.VALIDATED)
        return await self._execute(operation, {"address": address})

    async def _execute(
        self, operation: OperationDescriptor, kwargs: dict[str, Any]
    ) -> OperationResult:
        _trace(operation.name, CallState.EXECUTING)
        try:
            text = await operation.handler(**kwargs)
        except Exception as e:
            logger.error("Error in %s: %s", operation.name, e)
            message = f"Error in {operation.name}: {e}"
            return _respond(operation.name, CallState.FAILED, message)
        return _respond(operation.name, CallState.SUCCEEDED, text)


def _trace(name: str, state: CallState) -> None:
    logger.debug("%s: %s", name, state.value)


def _respond(name: str, outcome: CallState, text: str) -> OperationResult:
    _trace(name, outcome)
    _trace(name, CallState.RESPONDED)
    return OperationResult(
        content=[text], is_error=outcome is CallState.FAILED, outcome=outcome
    )
