from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

from kiosk.metrics import PrometheusExporter, metrics_registry

router = APIRouter(tags=["health"])


@router.get("/metrics", response_class=PlainTextResponse, summary="Prometheus metrics")
async def metrics() -> str:
    return PrometheusExporter(metrics_registry).export()
