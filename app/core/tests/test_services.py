"""
Tests for ServiceResult and BaseService.
"""

import pytest

from core.services import BaseService, ServiceResult


class ExampleService(BaseService):
    pass


class TestServiceResult:
    def test_success(self):
        result = ServiceResult.success({"id": 1})

        assert result.success
        assert bool(result)
        assert result.to_response() == {"success": True, "data": {"id": 1}}

    def test_failure_envelope(self):
        result = ServiceResult.failure(
            "Unknown status",
            "INVALID_FILTER",
            errors={"status": ["Must be one of pending, paid, failed"]},
        )

        assert not result
        assert result.to_response() == {
            "success": False,
            "error": "Unknown status",
            "error_code": "INVALID_FILTER",
            "errors": {"status": ["Must be one of pending, paid, failed"]},
        }

    def test_failure_without_code(self):
        assert ServiceResult.failure("Payment not found").to_response() == {
            "success": False,
            "error": "Payment not found",
        }


class TestBaseService:
    def test_logger_named_after_class(self):
        assert ExampleService.get_logger().name == f"{__name__}.ExampleService"

    @pytest.mark.django_db
    def test_atomic_rolls_back(self):
        from django.contrib.auth import get_user_model

        User = get_user_model()

        with pytest.raises(RuntimeError), ExampleService.atomic():
            User.objects.create(username="rolled-back")
            raise RuntimeError("abort")

        assert not User.objects.filter(username="rolled-back").exists()

    @pytest.mark.django_db
    def test_atomic_commits(self):
        from django.contrib.auth import get_user_model

        User = get_user_model()

        with ExampleService.atomic():
            User.objects.create(username="kept")

        assert User.objects.filter(username="kept").exists()
