"""Messages exchanged between the coordinator and a worker process.

The coordinator sends exactly one ``start`` message to each worker. The
worker answers with exactly one ``done`` or ``error`` message and exits.
Messages cross the process boundary as plain dicts.
"""
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from shot_grabber.errors import ProtocolError
from shot_grabber.models import RunConfig, WorkerReport


class StartMessage(BaseModel):
    type: Literal["start"] = "start"
    config: RunConfig
    urls: list[str]


class DoneMessage(BaseModel):
    type: Literal["done"] = "done"
    report: WorkerReport


class ErrorMessage(BaseModel):
    type: Literal["error"] = "error"
    worker_index: int
    reason: str


WorkerMessage = Annotated[
    Union[StartMessage, DoneMessage, ErrorMessage], Field(discriminator="type")
]

_adapter = TypeAdapter(WorkerMessage)


def encode(message: BaseModel) -> dict:
    return message.model_dump(mode="json")


def parse_message(raw) -> Union[StartMessage, DoneMessage, ErrorMessage]:
    """Validate a raw message, raising ProtocolError for anything unknown."""
    try:
        return _adapter.validate_python(raw)
    except ValidationError as e:
        kind = raw.get("type") if isinstance(raw, dict) else type(raw).__name__
        raise ProtocolError(f"Unknown message type: {kind!r}") from e
