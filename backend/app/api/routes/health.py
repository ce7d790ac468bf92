"""Health check endpoint."""

from fastapi import APIRouter

from backend.app.config import get_settings

router = APIRouter()


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/healthz")
async def healthz() -> dict[str, object]:
    """Health check with the configuration state of each upstream.

    Upstreams are not contacted: every one of them is optional, the pipeline
    degrades to the fallback catalog when all are missing.
    """
    settings = get_settings()
    api_key = settings.openai_api_key

    return {
        "status": "ok",
        "components": {
            "otp_transmodel": "configured" if settings.otp_transmodel_url else "not_configured",
            "otp_plan": "configured" if settings.otp_plan_url else "not_configured",
            "generative": "configured" if api_key and api_key.get_secret_value() else "not_configured",
        },
    }
