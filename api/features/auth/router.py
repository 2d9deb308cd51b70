"""Router for the Auth feature."""
from typing import Any, Dict, Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Query

from api.features.auth.controller import AuthController
from di.container import ApplicationContainer as DependencyContainer

router = APIRouter()


@router.post("/login", response_model=Dict[str, Any])
@inject
async def login(
    credential: Optional[str] = Query(None, description="Google ID token"),
    controller: AuthController = Depends(
        Provide[DependencyContainer.controllers.auth_controller]
    ),
):
    """Verify a Google ID token and return its identity payload."""
    return await controller.login(credential=credential)
