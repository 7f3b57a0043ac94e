"""
Users API router.

Routes (mounted with the '/users' prefix in the main app):
- POST /users - Register a user
- GET /users - List users, zero-indexed ``page`` and ``size`` parameters
- GET /users/{user_id} - Fetch one user
- PUT /users/{user_id} - Update first and/or last name
- DELETE /users/{user_id} - Delete a user

Domain failures propagate to the exception handlers registered in
``shop.api.app``.
"""

import logging
import math

from fastapi import APIRouter, Depends, Query, Response, status

from shop.api.dependencies import get_user_service
from shop.api.requests import CreateUserRequest, UpdateUserRequest
from shop.api.responses import PaginatedUsersResponse, UserResponse
from shop.exceptions import NotFoundError
from shop.usecase import UserService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "", response_model=UserResponse, status_code=status.HTTP_201_CREATED
)
async def create_user(
    request: CreateUserRequest,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    logger.info("User creation requested", extra={"email": request.email})
    user = await service.create_user(
        request.email, request.first_name, request.last_name
    )
    return UserResponse.from_domain(user)


@router.get("", response_model=PaginatedUsersResponse)
async def list_users(
    page: int = Query(default=0, ge=0),
    size: int = Query(default=10, ge=1, le=100),
    service: UserService = Depends(get_user_service),
) -> PaginatedUsersResponse:
    users, total_count = await service.get_all_users(page, size)
    return PaginatedUsersResponse(
        users=[UserResponse.from_domain(u) for u in users],
        page=page,
        size=size,
        total_count=total_count,
        total_pages=math.ceil(total_count / size),
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = await service.get_user(user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return UserResponse.from_domain(user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    request: UpdateUserRequest,
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = await service.update_user(
        user_id, request.first_name, request.last_name
    )
    return UserResponse.from_domain(user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    service: UserService = Depends(get_user_service),
) -> Response:
    if not await service.delete_user(user_id):
        raise NotFoundError("User", user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
