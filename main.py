# D:\github\DISASTER_REPORT_BACK\main.py
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import config
from routers.incidents import router as incidents_router
from services.incident_backend import InMemoryIncidentBackend

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s | %(levelname)s | %(message)s",
)
logging.getLogger("urllib3").setLevel(logging.WARNING)


def create_app(backend: Optional[InMemoryIncidentBackend] = None) -> FastAPI:
    app = FastAPI(
        title="Disaster Incident Reporter API",
        description="災害事件回報：列表/篩選/新增",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.incident_backend = backend if backend is not None else InMemoryIncidentBackend()
    app.include_router(incidents_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    logging.info(f"Disaster Incident Reporter API → http://localhost:{config.PORT}/api")
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
