from __future__ import annotations

from fastapi import Depends, Request

from hostdni.config import Settings, get_settings
from hostdni.models.paths import HostsPaths
from hostdni.security import TokenManager
from hostdni.services.catalogs import Catalogs
from hostdni.services.elevation import ElevatedExecutor


def get_token_manager(request: Request) -> TokenManager:
    return request.app.state.tokens


def get_executor(request: Request) -> ElevatedExecutor:
    return request.app.state.executor


def get_catalogs(request: Request) -> Catalogs:
    return request.app.state.catalogs


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_hosts_paths(settings: Settings = Depends(get_app_settings)) -> HostsPaths:
    return HostsPaths.from_settings(settings)
