"""Tests for the response envelope and the error mapping table."""

import json

import pytest
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.testclient import TestClient
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from apps.shared import errors
from apps.shared.envelope import HttpResponse, describe_status
from apps.shared.errors import (
    BadRequestError,
    NotFoundError,
    describe_error,
    log_and_sanitize_error,
    setup_error_handlers,
    status_for,
)
from apps.blog.exceptions import BlogNotFoundError, InvalidImageError
from apps.blog.schemas import BlogCreate, BlogIdData


class TestEnvelope:
    def test_build_fills_status_fields(self):
        envelope = HttpResponse.build(201, "Blog created successfully")
        assert envelope.status_code == 201
        assert envelope.status == "CREATED"
        assert envelope.reason == "Created"

    def test_wire_shape_is_camel_case(self):
        envelope = HttpResponse[BlogIdData].build(
            201, "Blog created successfully", "Blog creation processed", BlogIdData(blog_id=7)
        )
        response = envelope.to_response()
        body = json.loads(response.body)

        assert response.status_code == 201
        assert set(body) == {
            "timeStamp", "statusCode", "status", "reason",
            "message", "developerMessage", "data",
        }
        assert body["statusCode"] == 201
        assert body["data"] == {"blogId": 7}

    def test_failure_envelope_has_no_data(self):
        body = json.loads(HttpResponse.build(404, "Failed to retrieve blog", "gone").to_response().body)
        assert "data" not in body
        assert body["status"] == "NOT_FOUND"
        assert body["reason"] == "Not Found"


class TestStatusMapping:
    def test_not_found(self):
        assert status_for(BlogNotFoundError(3)) == 404
        assert status_for(NotFoundError("missing")) == 404

    def test_bad_request(self):
        assert status_for(InvalidImageError("bad type")) == 400
        assert status_for(BadRequestError("bad")) == 400
        assert status_for(RequestValidationError([])) == 400

    def test_pydantic_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            BlogCreate.model_validate_json("{not json")
        assert status_for(exc_info.value) == 400

    def test_http_exception_keeps_status(self):
        assert status_for(StarletteHTTPException(status_code=405)) == 405

    def test_everything_else_is_500(self):
        assert status_for(RuntimeError("disk full")) == 500
        assert status_for(KeyError("x")) == 500


class TestDescribeError:
    def test_flattens_validation_errors(self):
        with pytest.raises(ValidationError) as exc_info:
            BlogCreate.model_validate({"content": "body"})
        assert describe_error(exc_info.value) == "title: Field required"

    def test_not_found_message(self):
        assert describe_error(BlogNotFoundError(9)) == "Blog not found with id 9"


def test_log_and_sanitize_error_hides_details(caplog):
    message, error_id = log_and_sanitize_error(
        RuntimeError("password=hunter2"), "Failed to create blog"
    )
    assert "hunter2" not in message
    assert error_id in message
    assert "hunter2" in caplog.text


def test_production_hides_raw_error_text(client, monkeypatch):
    from apps.blog.service import BlogService

    def explode(self, keyword):
        raise RuntimeError("connection to 10.0.0.5 refused")

    monkeypatch.setattr(BlogService, "search_blogs", explode)
    monkeypatch.setattr(errors, "ENVIRONMENT", "production")

    response = client.get("/api/v1/blogs/search", params={"keyword": "x"})

    assert response.status_code == 500
    body = response.json()
    assert body["message"] == "Failed to search blogs"
    assert "10.0.0.5" not in body["developerMessage"]
    assert "Error ID" in body["developerMessage"]


class TestNonStandardStatus:
    def test_describe_status_falls_back(self):
        assert describe_status(404) == ("NOT_FOUND", "Not Found")
        assert describe_status(499) == ("HTTP_499", "Unknown Status")

    def test_envelope_for_unknown_status(self):
        envelope = HttpResponse.build(499, "Client closed request")
        assert envelope.status_code == 499
        assert envelope.status == "HTTP_499"

    def test_http_exception_keeps_unknown_status(self):
        app = FastAPI()
        setup_error_handlers(app)

        @app.get("/closed")
        def closed():
            raise HTTPException(status_code=499, detail="client went away")

        response = TestClient(app).get("/closed")

        assert response.status_code == 499
        body = response.json()
        assert body["statusCode"] == 499
        assert body["reason"] == "Unknown Status"
        assert body["developerMessage"] == "client went away"
