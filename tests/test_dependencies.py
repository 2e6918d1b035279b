from typing import Annotated

import pytest
import pytest_asyncio
from fastapi import Depends, FastAPI, HTTPException
from httpx import ASGITransport, AsyncClient

from skillharbor.features.auth.principal import Principal
from skillharbor.features.permissions.catalog import Permission
from skillharbor.features.permissions.dependencies import (
    raise_for_decision,
    require_access,
    require_any_permission,
)
from skillharbor.features.permissions.guard import (
    PERMISSION_DENIED,
    RESOURCE_DENIED,
    SELF_ACCESS,
    UNAUTHENTICATED,
    AccessRequest,
)


guarded = FastAPI()


@guarded.get("/organization")
async def organization_overview(
    principal: Annotated[Principal, Depends(require_access(resource="organization", action="view"))]
):
    return {"viewer": principal.email}


@guarded.get("/assessments")
async def assessments(
    principal: Annotated[Principal, Depends(require_any_permission([
        Permission.CONDUCT_ASSESSMENTS,
        Permission.VIEW_ALL_EMPLOYEES,
    ]))]
):
    return {"viewer": principal.email}


@pytest_asyncio.fixture
async def guarded_client(seeded_users):
    async with AsyncClient(transport=ASGITransport(app=guarded), base_url="http://test") as ac:
        yield ac


def test_require_any_permission_rejects_empty_list():
    with pytest.raises(ValueError):
        require_any_permission([])


def test_raise_for_decision_allows():
    raise_for_decision(SELF_ACCESS, AccessRequest())


def test_raise_for_decision_unauthenticated():
    with pytest.raises(HTTPException) as excinfo:
        raise_for_decision(UNAUTHENTICATED, AccessRequest())
    assert excinfo.value.status_code == 401
    assert excinfo.value.detail["code"] == "AUTH_REQUIRED"


def test_raise_for_decision_resource_denied():
    request = AccessRequest(resource="organization", action="view")
    with pytest.raises(HTTPException) as excinfo:
        raise_for_decision(RESOURCE_DENIED, request)
    assert excinfo.value.status_code == 403
    assert excinfo.value.detail["resource"] == "organization"
    assert excinfo.value.detail["action"] == "view"


def test_raise_for_decision_lists_required_permissions():
    request = AccessRequest(permissions=[Permission.MANAGE_USERS])
    with pytest.raises(HTTPException) as excinfo:
        raise_for_decision(PERMISSION_DENIED, request)
    assert excinfo.value.detail["required"] == ["manage_users"]


async def test_resource_guard_over_http(guarded_client, login):
    response = await guarded_client.get("/organization")
    assert response.status_code == 401

    employee = await login("employee@skillharbor.io")
    response = await guarded_client.get("/organization", headers=employee)
    assert response.status_code == 403
    assert response.json()["detail"]["reason"] == "resource_denied"

    lead = await login("lead@skillharbor.io")
    response = await guarded_client.get("/organization", headers=lead)
    assert response.status_code == 200
    assert response.json() == {"viewer": "lead@skillharbor.io"}


async def test_any_permission_guard_over_http(guarded_client, login):
    employee = await login("employee@skillharbor.io")
    response = await guarded_client.get("/assessments", headers=employee)
    assert response.status_code == 403

    hr = await login("hr@skillharbor.io")
    response = await guarded_client.get("/assessments", headers=hr)
    assert response.status_code == 200
