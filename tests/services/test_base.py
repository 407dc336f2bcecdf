"""Tests for BaseService error translation."""

import pytest
from pydantic import ValidationError

from zonectl.domain.errors import AuthorizationError
from zonectl.domain.operations import parse_operations
from zonectl.services.base import BaseService


class TestFailure:
    def test_copies_code_message_and_detail(self) -> None:
        exc = AuthorizationError("role [web] may not manage [x]", role="web")
        result = BaseService._failure("apply", exc, index=2)
        assert not result.ok
        assert result.op == "apply"
        assert result.error is not None
        assert result.error.code == "UNAUTHORIZED"
        assert result.error.message == "role [web] may not manage [x]"
        assert result.error.detail == {"role": "web", "index": 2}


class TestInvalidPayload:
    def test_lists_each_problem_with_location(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            parse_operations([{"op": "update", "type": "A", "content": "x"}])
        result = BaseService._invalid_payload("apply", exc_info.value)

        assert result.error is not None
        assert result.error.code == "INVALID_OPERATION"
        assert result.error.detail["errors"] == ["0.domain: Field required"]
