"""
bizdesk/api/companies.py — Эндпоинты компаний.

Создание и изменение принимают JSON; логотип загружается отдельным
multipart-запросом ``update-logo``.
"""

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status

from bizdesk.dependencies import get_current_user
from bizdesk.middlewares import (
    has_existing_company_relations,
    has_no_company,
    validate_coordinates,
    verify_company_ownership,
)
from bizdesk.models.company import CompanyCreate, CompanyUpdate
from bizdesk.models.user import CurrentUser
from bizdesk.services import company_service
from bizdesk.services.rbac import require_permission

router = APIRouter(prefix="/companies", tags=["companies"])


@router.get(
    "/get-company",
    dependencies=[Depends(require_permission("company.read"))],
    summary="Компания текущего пользователя",
)
async def get_company(user: CurrentUser = Depends(get_current_user)):
    """Возвращает компанию со связями (по 4 последних записи каждого типа)."""
    return await company_service.get_company(user)


@router.post(
    "/create-company",
    status_code=status.HTTP_201_CREATED,
    dependencies=[
        Depends(require_permission("company.create")),
        Depends(has_no_company),
        Depends(has_existing_company_relations),
        Depends(validate_coordinates),
    ],
    summary="Создать компанию",
)
async def create_company(
    body: CompanyCreate,
    response: Response,
    user: CurrentUser = Depends(get_current_user),
):
    """Создатель становится владельцем; токены переиздаются с новой ролью."""
    return await company_service.create_company(body, user, response)


@router.patch(
    "/{company_id}/update-company",
    dependencies=[
        Depends(require_permission("company.update")),
        Depends(has_existing_company_relations),
        Depends(verify_company_ownership),
        Depends(validate_coordinates),
    ],
    summary="Изменить данные компании",
)
async def update_company(company_id: str, body: CompanyUpdate):
    return await company_service.update_company(company_id, body)


@router.patch(
    "/{company_id}/update-logo",
    dependencies=[Depends(require_permission("company.update"))],
    summary="Загрузить логотип компании",
)
async def update_logo(
    company: dict = Depends(verify_company_ownership),
    image: UploadFile = File(...),
):
    return await company_service.update_logo(company, image)


@router.delete(
    "/{company_id}/delete-company",
    dependencies=[Depends(require_permission("company.delete"))],
    summary="Удалить компанию со всеми данными",
)
async def delete_company(
    response: Response,
    company: dict = Depends(verify_company_ownership),
    user: CurrentUser = Depends(get_current_user),
    postman_request: bool = Query(False, alias="postmanRequest"),
):
    message = await company_service.delete_company(company, user, response, postman_request)
    return {"message": message}
