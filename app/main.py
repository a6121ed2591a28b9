from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.benefits.router import router as benefits_router
from app.api.v1.payouts.router import router as payouts_router
from app.api.v1.referrals.router import router as referrals_router
from app.api.v1.settlements.router import router as settlements_router
from app.core.logging import configure_logging


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Ambassador Rewards Backend")

    # CORS: allow the admin and ambassador frontends to call this API
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(benefits_router)
    app.include_router(referrals_router)
    app.include_router(settlements_router)
    app.include_router(payouts_router)

    return app


app = create_app()
