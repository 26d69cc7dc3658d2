"""
/alerts — the advisory banner.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ...api.schemas import BannerOut
from ...signals.state import AlertType

router = APIRouter(prefix="/alerts", tags=["alerts"])


def _get_services(request: Request):
    return request.app.state.services


def _banner_out(view) -> BannerOut:
    return BannerOut(
        visible=view.visible.value if view.visible else None,
        flags=view.flags,
        message=view.message,
    )


@router.get("", response_model=BannerOut)
async def get_banner(services=Depends(_get_services)):
    """Evaluate the alert rules and return which banner, if any, is visible."""
    return _banner_out(services["monitor"].evaluate())


@router.post("/{alert_type}/dismiss", response_model=BannerOut)
async def dismiss(alert_type: AlertType, services=Depends(_get_services)):
    return _banner_out(services["monitor"].dismiss(alert_type))
