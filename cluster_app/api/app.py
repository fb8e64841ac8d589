"""
API Gateway
Customer segmentation analytics service
"""
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cluster_app import __version__
from cluster_app.api.analysis import router as analysis_router

app = FastAPI(
    title="Cluster Analytics API",
    description="Customer segmentation, metrics and insight payloads for uploaded customer data",
    version=__version__,
)

# 配置 CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=(os.getenv("CORS_ALLOW_ORIGINS") or "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analysis_router)


@app.get("/")
async def root():
    """API 根路径"""
    return {
        "name": "Cluster Analytics API",
        "version": __version__,
        "status": "running",
        "endpoints": {
            "health": "/health",
            "analysis": "/api/v1/analysis",
            "analysis_csv": "/api/v1/analysis/csv",
            "analysis_sample": "/api/v1/analysis/sample",
        },
    }


@app.get("/health")
async def health():
    """健康检查"""
    return {
        "status": "healthy",
        "service": "cluster-analytics-api",
    }


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
