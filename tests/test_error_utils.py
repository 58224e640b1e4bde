"""Unit tests for ecr_pruner/error_utils.py"""

from botocore.exceptions import ClientError, NoCredentialsError

from ecr_pruner.error_utils import (
    ActionableError,
    AggregateError,
    ErrorCategory,
    ListRepositoriesError,
    RegistryError,
    create_registry_error,
)


def _client_error(code):
    return ClientError({"Error": {"Code": code, "Message": "details"}}, "ListImages")


class TestActionableError:
    def test_message_includes_suggestions_and_details(self):
        error = ActionableError("Something broke", suggestions=["Try again"], details={"repo": "app"})
        text = str(error)
        assert text.startswith("Something broke")
        assert "1. Try again" in text
        assert "repo: app" in text


class TestCreateRegistryError:
    """Tests for mapping AWS failures onto error categories"""

    def test_permission(self):
        error = create_registry_error("list_images", _client_error("AccessDeniedException"), repository="app")
        assert isinstance(error, RegistryError)
        assert error.category is ErrorCategory.PERMISSION
        assert error.repository == "app"
        assert "for repository 'app'" in error.message

    def test_repository_not_found(self):
        error = create_registry_error("list_images", _client_error("RepositoryNotFoundException"))
        assert error.category is ErrorCategory.RESOURCE

    def test_throttling(self):
        error = create_registry_error("batch_delete_image", _client_error("ThrottlingException"))
        assert error.category is ErrorCategory.NETWORK
        assert any("max_workers" in s for s in error.suggestions)

    def test_missing_credentials(self):
        error = create_registry_error("describe_repositories", NoCredentialsError())
        assert error.error_code == "NoCredentialsError"
        assert error.category is ErrorCategory.AUTHENTICATION

    def test_unknown(self):
        error = create_registry_error("list_images", _client_error("SomethingNew"))
        assert error.category is ErrorCategory.UNKNOWN
        assert error.error_code == "SomethingNew"


class TestRunErrors:
    def test_list_repositories_error_uses_short_message(self):
        cause = create_registry_error("describe_repositories", _client_error("AccessDeniedException"))
        error = ListRepositoriesError(cause)
        assert error.cause is cause
        assert str(error) == f"Failed to list repositories: {cause.message}"

    def test_aggregate_error(self):
        error = AggregateError(2, ["a", "b"])
        assert str(error) == "2 errors occurred!"
        assert error.failed_count == 2
        assert error.failed_repositories == ["a", "b"]
