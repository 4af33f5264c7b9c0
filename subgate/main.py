import logging

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from subgate.app.billing import EntitlementError
from subgate.app.feature_gates import FeatureGateError
from subgate.app.routes.subscription import router as subscription_router
from subgate.config import SubgateConfig, load_config

load_dotenv()

logger = logging.getLogger("subgate")


def create_app(config: SubgateConfig | None = None) -> FastAPI:
    config = config or load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Subscription Gate API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.app_base_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(subscription_router)

    @app.exception_handler(FeatureGateError)
    async def _feature_gate_error(request: Request, exc: FeatureGateError) -> JSONResponse:
        logger.info("Gate closed for %s %s: %s", request.method, request.url.path, exc.code)
        return exc.to_response()

    @app.exception_handler(EntitlementError)
    async def _entitlement_error(request: Request, exc: EntitlementError) -> JSONResponse:
        logger.error("Entitlement failure for %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content=exc.payload)

    @app.get("/api/healthz")
    def healthz():
        return {"ok": True}

    return app


app = create_app()
