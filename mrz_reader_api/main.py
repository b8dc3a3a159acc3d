from fastapi import FastAPI
from app.core.logging import logger
from app.api.v1.endpoints.mrz import router as mrz_v1_router
from prometheus_fastapi_instrumentator import Instrumentator


def create_app() -> FastAPI:
    app = FastAPI(title="MRZ Reader API")

    app.include_router(mrz_v1_router, prefix="/api/v1/mrz", tags=["v1"])

    # Health check route (Prometheus can also use this)
    @app.get("/healthz")
    def health_check():
        return {"status": "ok"}

    # Initialize Prometheus metrics
    Instrumentator().instrument(app).expose(app, endpoint="/metrics")

    logger.info("MRZ Reader API initialised")
    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
