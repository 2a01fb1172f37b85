"""Router aggregating all endpoint routers.

Routes are unversioned: the login URLs are registered with GitHub and the
dashboard calls ``/api/...`` directly.
"""

from __future__ import annotations

from fastapi import APIRouter

from repo_analyzer.api.endpoints import admin, auth, health, repositories, root, session


router = APIRouter()

router.include_router(root.router)
router.include_router(health.router)
router.include_router(auth.router)
router.include_router(session.router)
router.include_router(admin.router)
router.include_router(repositories.router)
