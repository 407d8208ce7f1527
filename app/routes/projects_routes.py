from typing import List

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_async_session
from app.deps.auth import get_current_user, require_council
from app.models.project_model import Project
from app.models.user_model import User
from app.schemas.project_schemas import ProjectCreate, ProjectOut, ProjectUpdate, ProjectWithAuthorOut
from app.services.project_service import projects
from app.utils.token_utils import TokenClaims

router = APIRouter(prefix="/projects", tags=["projects"])

INCLUDE_AUTHOR = Query(False, description="Embed the author record in each project")


def _project_out(project: Project, include_author: bool) -> ProjectOut:
    if include_author:
        return ProjectWithAuthorOut.model_validate(project)
    return ProjectOut.model_validate(project)


# ---- Councilors/admins: create
@router.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
async def create_project(
    payload: ProjectCreate,
    db: AsyncSession = Depends(get_async_session),
    _claims: TokenClaims = Depends(require_council),
    author: User = Depends(get_current_user),
):
    return await projects.create(db, payload.model_dump(), author_id=author.id)


# ---- Public: list / read
@router.get("", response_model=List[ProjectWithAuthorOut])
async def list_projects(
    include_author: bool = INCLUDE_AUTHOR,
    db: AsyncSession = Depends(get_async_session),
):
    rows = await projects.list_all(db, include_author=include_author)
    return [_project_out(p, include_author) for p in rows]


@router.get("/author/{author_id}", response_model=List[ProjectWithAuthorOut])
async def list_projects_by_author(
    author_id: str,
    include_author: bool = INCLUDE_AUTHOR,
    db: AsyncSession = Depends(get_async_session),
):
    rows = await projects.list_by_author(db, author_id, include_author=include_author)
    return [_project_out(p, include_author) for p in rows]


@router.get("/{project_id}", response_model=ProjectWithAuthorOut)
async def get_project(
    project_id: str,
    include_author: bool = INCLUDE_AUTHOR,
    db: AsyncSession = Depends(get_async_session),
):
    project = await projects.get(db, project_id, include_author=include_author)
    return _project_out(project, include_author)


# ---- Author (councilor/admin): update / delete
# The role guard runs first, as a dependency, so a citizen gets 403 without a
# database read. The author check needs the loaded project and runs inside
# the service. Both failures are 403.
@router.patch("/{project_id}", response_model=ProjectOut)
async def update_project(
    project_id: str,
    payload: ProjectUpdate,
    db: AsyncSession = Depends(get_async_session),
    claims: TokenClaims = Depends(require_council),
):
    return await projects.update(db, project_id, payload.model_dump(exclude_unset=True), claims)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: str,
    db: AsyncSession = Depends(get_async_session),
    claims: TokenClaims = Depends(require_council),
):
    await projects.delete(db, project_id, claims)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
