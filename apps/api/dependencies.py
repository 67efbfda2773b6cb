"""
Зависимости API: пользователь и внешние клиенты
"""
from typing import Optional

from fastapi import Header, HTTPException, status

from shared.services.contract_permission_service import Actor, PermissionOracle, RolePermissionOracle
from shared.services.media_storage import ArtifactStorageClient, get_artifact_storage_client
from shared.services.rendering_client import RenderingServiceClient
from shared.services.senders.email_sender import EmailDeliveryClient


async def get_actor(
    x_actor_id: Optional[str] = Header(None),
    x_actor_role: str = Header("employee"),
    x_actor_permissions: str = Header(""),
    x_actor_name: Optional[str] = Header(None),
) -> Actor:
    """Пользователь из заголовков, проставленных шлюзом авторизации."""
    if not x_actor_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Не указан пользователь (X-Actor-Id)"
        )
    permissions = frozenset(p.strip() for p in x_actor_permissions.split(",") if p.strip())
    return Actor(id=x_actor_id, role=x_actor_role, permissions=permissions, name=x_actor_name)


def get_permission_oracle() -> PermissionOracle:
    return RolePermissionOracle()


def get_rendering_client() -> RenderingServiceClient:
    return RenderingServiceClient()


def get_email_delivery_client() -> EmailDeliveryClient:
    return EmailDeliveryClient()


def get_artifact_storage() -> ArtifactStorageClient:
    return get_artifact_storage_client()
