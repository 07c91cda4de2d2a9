from fastapi import FastAPI
from flinkguard.api.routes import admission, health
from flinkguard.logging import setup_logger

setup_logger("flinkguard")

app = FastAPI(title="flinkguard", version="v1alpha1")

app.include_router(health.router)
app.include_router(admission.router)
