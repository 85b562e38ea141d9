import logging

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from sui_decoder.core.dependencies import get_dependencies
from sui_decoder.core.dependency_container import DependencyContainer

logger = logging.getLogger(__name__)

router = APIRouter()

UNREACHABLE_BODY = {"error": "Gateway timeout - Sui node unreachable"}


@router.post("/api/sui")
async def sui_rpc_relay(
    request: Request,
    dependencies: DependencyContainer = Depends(get_dependencies),
) -> JSONResponse:
    """
    Same-origin relay to the Sui node.

    Forwards the JSON-RPC body verbatim and mirrors the upstream status code and
    JSON body, so browser clients avoid cross-origin calls to the node. Failing to
    reach the node, or getting a body that is not JSON back, answers 504.
    """
    upstream_url = dependencies.settings.get_sui_rpc_upstream_url()
    body = await request.body()

    logger.info(
        "Relaying JSON-RPC request",
        extra={"upstream_url": upstream_url, "body_length": len(body)},
    )

    try:
        upstream = await dependencies.http_client.post(
            upstream_url,
            content=body,
            headers={"Content-Type": "application/json"},
        )
    except httpx.HTTPError as e:
        logger.error(f"Sui node unreachable via relay ({upstream_url}): {e}")
        return JSONResponse(status_code=504, content=UNREACHABLE_BODY)

    try:
        data = upstream.json()
    except ValueError:
        # A body that is not JSON is treated like no answer at all
        logger.error(f"Sui node returned non-JSON body with status {upstream.status_code}")
        return JSONResponse(status_code=504, content=UNREACHABLE_BODY)

    return JSONResponse(status_code=upstream.status_code, content=data)
