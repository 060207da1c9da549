from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from labour_engine.config import configure_logging, settings
from labour_engine.routers import audit, calculate, entitlements, fatigue, health, rates

configure_logging(settings.log_level)

app = FastAPI(
    title="Labour Award Engine API",
    description="Award pay, fatigue, entitlement and compliance calculations",
    version="1.0.0",
)

# CORS open for now, locked down per client deployment
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(rates.router)
app.include_router(calculate.router)
app.include_router(fatigue.router)
app.include_router(entitlements.router)
app.include_router(audit.router)
