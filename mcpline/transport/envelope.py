"""
RPC envelopes exchanged over the line transport.

Request:  {"protocolVersion": "2.0", "id": ..., "method": "tool", "params": {"name": ..., "input": ...}}
Response: {"protocolVersion": "2.0", "id": ..., "result": ...}
      or  {"protocolVersion": "2.0", "id": ..., "error": {"code": ..., "message": ..., "data": ...}}
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, ValidationError

PROTOCOL_VERSION = "2.0"

RequestId = Optional[Union[StrictStr, StrictInt, StrictFloat]]

_UNSET: Any = object()


class ErrorCode(IntEnum):
    """Fixed wire error codes."""
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


ERROR_MESSAGES = {
    ErrorCode.PARSE_ERROR: "Parse error",
    ErrorCode.INVALID_REQUEST: "Invalid Request",
    ErrorCode.METHOD_NOT_FOUND: "Method not found",
    ErrorCode.INVALID_PARAMS: "Invalid params",
    ErrorCode.INTERNAL_ERROR: "Internal error",
}


class RpcRequest(BaseModel):
    """Inbound request envelope."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    protocol_version: Literal["2.0"] = Field(..., alias="protocolVersion")
    id: RequestId = None
    method: StrictStr
    params: Any = None


class ToolCallParams(BaseModel):
    """``params`` of a ``tool`` request."""

    name: StrictStr
    input: Any = None


def parse_request(payload: Any) -> RpcRequest:
    """Validate a decoded line; raises pydantic.ValidationError on bad shape."""
    return RpcRequest.model_validate(payload)


def parse_tool_params(params: Any) -> ToolCallParams:
    return ToolCallParams.model_validate(params)


def best_effort_id(payload: Any) -> RequestId:
    """Recover a usable id from a malformed request, or None."""
    if not isinstance(payload, dict):
        return None
    candidate = payload.get("id")
    if isinstance(candidate, bool):
        return None
    if isinstance(candidate, (str, int, float)):
        return candidate
    return None


def success_response(request_id: RequestId, result: Any) -> Dict[str, Any]:
    return {"protocolVersion": PROTOCOL_VERSION, "id": request_id, "result": result}


def error_response(
    request_id: RequestId,
    code: ErrorCode,
    message: Optional[str] = None,
    data: Any = _UNSET,
) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": int(code), "message": message or ERROR_MESSAGES[code]}
    if data is not _UNSET:
        error["data"] = data
    return {"protocolVersion": PROTOCOL_VERSION, "id": request_id, "error": error}


__all__ = [
    "PROTOCOL_VERSION",
    "ErrorCode",
    "RpcRequest",
    "ToolCallParams",
    "ValidationError",
    "parse_request",
    "parse_tool_params",
    "best_effort_id",
    "success_response",
    "error_response",
]
