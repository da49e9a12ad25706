"""Unit tests for ProjectHookService."""

from unittest.mock import create_autospec

import pytest

from hooks.application.observability import ProjectHookServiceProbe
from hooks.application.services import ProjectHookService
from hooks.application.value_objects import ProjectHookView
from hooks.domain.aggregates import ProjectHook
from hooks.domain.exceptions import InvalidHookUrlError, MissingHookUrlError
from hooks.domain.value_objects import ProjectHookId
from hooks.ports.exceptions import (
    ProjectHookNotFoundError,
    ProjectNotFoundError,
    UnauthorizedError,
)
from hooks.ports.repositories import IProjectHookRepository
from membership.application.services import MembershipResolver
from membership.domain.value_objects import ProjectId, UserId
from membership.ports.repositories import IGroupRepository, IProjectRepository


@pytest.fixture
def mock_hook_repository():
    return create_autospec(IProjectHookRepository, instance=True)


@pytest.fixture
def mock_project_repository(project):
    repository = create_autospec(IProjectRepository, instance=True)
    repository.get_by_id.return_value = project
    return repository


@pytest.fixture
def mock_group_repository(root_group, subgroup):
    repository = create_autospec(IGroupRepository, instance=True)
    repository.get_ancestors.return_value = [subgroup, root_group]
    return repository


@pytest.fixture
def mock_probe():
    return create_autospec(ProjectHookServiceProbe, instance=True)


@pytest.fixture
def master_id(root_group) -> UserId:
    """A user with Master access inherited from the root group."""
    user_id = UserId.generate()
    root_group.add_master(user_id)
    return user_id


@pytest.fixture
def service(
    mock_session,
    mock_hook_repository,
    mock_project_repository,
    mock_group_repository,
    membership_settings,
    mock_probe,
):
    return ProjectHookService(
        session=mock_session,
        hook_repository=mock_hook_repository,
        project_repository=mock_project_repository,
        resolver=MembershipResolver(
            group_repository=mock_group_repository, settings=membership_settings
        ),
        probe=mock_probe,
    )


@pytest.fixture
def existing_hook(project, mock_hook_repository) -> ProjectHook:
    hook = ProjectHook.create(
        project_id=project.id, url="https://ci.example.com/hook", token="s3cret"
    )
    mock_hook_repository.get_by_id.return_value = hook
    return hook


class TestAuthorization:
    """Every operation needs Master access on the project's group."""

    @pytest.mark.asyncio
    async def test_developer_is_rejected(self, service, project, subgroup):
        developer = UserId.generate()
        subgroup.add_developer(developer)

        with pytest.raises(UnauthorizedError):
            await service.list_hooks(project.id, developer)

    @pytest.mark.asyncio
    async def test_inherited_owner_is_accepted(
        self, service, project, root_group, mock_hook_repository
    ):
        owner = UserId.generate()
        root_group.add_owner(owner)
        mock_hook_repository.list_for_project.return_value = []

        assert await service.list_hooks(project.id, owner) == []

    @pytest.mark.asyncio
    async def test_missing_project(self, service, mock_project_repository, master_id):
        mock_project_repository.get_by_id.return_value = None

        with pytest.raises(ProjectNotFoundError):
            await service.list_hooks(ProjectId.generate(), master_id)


class TestAddHook:
    @pytest.mark.asyncio
    async def test_adds_hook(
        self, service, project, master_id, mock_hook_repository, mock_probe
    ):
        view = await service.add_hook(
            project.id,
            master_id,
            url="https://ci.example.com/hook",
            token="s3cret",
            merge_requests_events=True,
        )

        assert isinstance(view, ProjectHookView)
        assert view.merge_requests_events is True
        assert not hasattr(view, "token")
        saved = mock_hook_repository.save.call_args[0][0]
        assert saved.token == "s3cret"
        mock_probe.hook_added.assert_called_once_with(
            project.id.value,
            saved.id.value,
            ["push_events", "merge_requests_events"],
        )

    @pytest.mark.asyncio
    async def test_missing_url(
        self, service, project, master_id, mock_hook_repository, mock_probe
    ):
        with pytest.raises(MissingHookUrlError):
            await service.add_hook(project.id, master_id, url=None)

        mock_hook_repository.save.assert_not_called()
        mock_probe.invalid_hook_rejected.assert_called_once_with(
            project.id.value, "url is missing"
        )

    @pytest.mark.asyncio
    async def test_invalid_url(self, service, project, master_id, mock_hook_repository):
        with pytest.raises(InvalidHookUrlError):
            await service.add_hook(project.id, master_id, url="ci.example.com")

        mock_hook_repository.save.assert_not_called()


class TestGetAndList:
    @pytest.mark.asyncio
    async def test_get_hook(self, service, project, master_id, existing_hook):
        view = await service.get_hook(project.id, existing_hook.id, master_id)

        assert view.id == existing_hook.id.value
        assert view.url == "https://ci.example.com/hook"

    @pytest.mark.asyncio
    async def test_hook_of_other_project_is_not_found(
        self, service, project, master_id, mock_hook_repository, mock_probe
    ):
        foreign = ProjectHook.create(
            project_id=ProjectId.generate(), url="https://example.com"
        )
        mock_hook_repository.get_by_id.return_value = foreign

        with pytest.raises(ProjectHookNotFoundError):
            await service.get_hook(project.id, foreign.id, master_id)

        mock_probe.hook_not_found.assert_called_once_with(
            project.id.value, foreign.id.value
        )

    @pytest.mark.asyncio
    async def test_missing_hook(
        self, service, project, master_id, mock_hook_repository
    ):
        mock_hook_repository.get_by_id.return_value = None

        with pytest.raises(ProjectHookNotFoundError):
            await service.get_hook(project.id, ProjectHookId.generate(), master_id)

    @pytest.mark.asyncio
    async def test_list_hooks(
        self, service, project, master_id, existing_hook, mock_hook_repository
    ):
        mock_hook_repository.list_for_project.return_value = [existing_hook]

        views = await service.list_hooks(project.id, master_id)

        assert [v.id for v in views] == [existing_hook.id.value]
        mock_hook_repository.list_for_project.assert_called_once_with(project.id)


class TestUpdateHook:
    @pytest.mark.asyncio
    async def test_updates_and_keeps_token(
        self, service, project, master_id, existing_hook, mock_hook_repository
    ):
        view = await service.update_hook(
            project.id,
            existing_hook.id,
            master_id,
            url="https://new.example.com",
            push_events=False,
            job_events=True,
        )

        assert view.url == "https://new.example.com"
        assert view.job_events is True
        assert existing_hook.token == "s3cret"
        mock_hook_repository.save.assert_called_once_with(existing_hook)

    @pytest.mark.asyncio
    async def test_update_requires_url(
        self, service, project, master_id, existing_hook, mock_hook_repository
    ):
        with pytest.raises(MissingHookUrlError):
            await service.update_hook(
                project.id, existing_hook.id, master_id, url=None
            )

        mock_hook_repository.save.assert_not_called()


class TestDeleteHook:
    @pytest.mark.asyncio
    async def test_deletes_hook(
        self,
        service,
        project,
        master_id,
        existing_hook,
        mock_hook_repository,
        mock_probe,
    ):
        await service.delete_hook(project.id, existing_hook.id, master_id)

        mock_hook_repository.delete.assert_called_once_with(existing_hook)
        mock_probe.hook_deleted.assert_called_once_with(
            project.id.value, existing_hook.id.value
        )

    @pytest.mark.asyncio
    async def test_requires_master(self, service, project, existing_hook):
        with pytest.raises(UnauthorizedError):
            await service.delete_hook(project.id, existing_hook.id, UserId.generate())
