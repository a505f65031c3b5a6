"""
User management API routes
All persistence goes through the injected UserRepository.
"""

import logging
from typing import List
from fastapi import APIRouter, HTTPException, Depends, Response, status

from models.user import User, UserRequest
from services.user_repository import UserRepository, DuplicateEmailError, get_user_repository
from utils.error_handling import set_endpoint_context

router = APIRouter()
logger = logging.getLogger(__name__)

@router.get("", response_model=List[User])
async def list_users(repository: UserRepository = Depends(get_user_repository)):
    """List all users"""
    set_endpoint_context("list_users")

    try:
        return await repository.find_all()
    except Exception as e:
        logger.error(f"Failed to list users: {e}")
        raise HTTPException(status_code=500, detail="Service error")

@router.get("/{user_id}", response_model=User)
async def get_user(
    user_id: int,
    repository: UserRepository = Depends(get_user_repository)
):
    """Get a user by id"""
    set_endpoint_context("get_user")

    try:
        user = await repository.find_by_id(user_id)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        return user

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to get user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Service error")

@router.post("", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: UserRequest,
    repository: UserRepository = Depends(get_user_repository)
):
    """Create a new user; the email must not be in use"""
    set_endpoint_context("create_user")

    try:
        if await repository.find_by_email(request.email) is not None:
            logger.warning(f"Rejected user creation, email already exists: {request.email}")
            raise HTTPException(status_code=409, detail="User with this email already exists")

        created = await repository.save(User(name=request.name, email=request.email))
        logger.info(f"Created user {created.id}")
        return created

    except HTTPException:
        raise
    except DuplicateEmailError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to create user: {e}")
        raise HTTPException(status_code=500, detail="Service error")

@router.put("/{user_id}", response_model=User)
async def update_user(
    user_id: int,
    request: UserRequest,
    repository: UserRepository = Depends(get_user_repository)
):
    """Replace the name and email of an existing user"""
    set_endpoint_context("update_user")

    try:
        existing = await repository.find_by_id(user_id)
        if existing is None:
            raise HTTPException(status_code=404, detail="User not found")

        if request.email != existing.email:
            holder = await repository.find_by_email(request.email)
            if holder is not None and holder.id != user_id:
                logger.warning(f"Rejected update of user {user_id}, email already in use: {request.email}")
                raise HTTPException(status_code=409, detail="User with this email already exists")

        updated = await repository.save(User(id=user_id, name=request.name, email=request.email))
        logger.info(f"Updated user {user_id}")
        return updated

    except HTTPException:
        raise
    except DuplicateEmailError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to update user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Service error")

@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    repository: UserRepository = Depends(get_user_repository)
):
    """Delete a user"""
    set_endpoint_context("delete_user")

    try:
        existing = await repository.find_by_id(user_id)
        if existing is None:
            raise HTTPException(status_code=404, detail="User not found")

        await repository.delete(existing)
        logger.info(f"Deleted user {user_id}")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Service error")
