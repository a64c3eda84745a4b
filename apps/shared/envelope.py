"""
Response envelope

Every endpoint answers with the same wrapper, success or failure:

    {timeStamp, statusCode, status, reason, message, developerMessage, data}

`data` carries a single named payload on success and is left out of
failure responses.
"""

from datetime import datetime
from http import HTTPStatus
from typing import Generic, Optional, TypeVar

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


def describe_status(status_code: int) -> tuple[str, str]:
    """Status name and reason phrase, e.g. ('NOT_FOUND', 'Not Found')."""
    try:
        http_status = HTTPStatus(status_code)
    except ValueError:
        # Non-standard codes such as 499
        return f"HTTP_{status_code}", "Unknown Status"
    return http_status.name, http_status.phrase


class CamelModel(BaseModel):
    """Base schema that reads and writes camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class HttpResponse(CamelModel, Generic[DataT]):
    time_stamp: str
    status_code: int
    status: str
    reason: str
    message: str
    developer_message: Optional[str] = None
    data: Optional[DataT] = None

    @classmethod
    def build(
        cls,
        status_code: int,
        message: str,
        developer_message: Optional[str] = None,
        data: Optional[DataT] = None,
    ) -> "HttpResponse[DataT]":
        """Fill in timestamp, status name and reason phrase from the status code."""
        status, reason = describe_status(status_code)
        return cls(
            time_stamp=datetime.now().isoformat(),
            status_code=status_code,
            status=status,
            reason=reason,
            message=message,
            developer_message=developer_message,
            data=data,
        )

    def to_response(self) -> JSONResponse:
        """Serialize with the envelope's own status code on the status line."""
        exclude = {"data"} if self.data is None else None
        body = self.model_dump(mode="json", by_alias=True, exclude=exclude)
        return JSONResponse(status_code=self.status_code, content=body)
