from fastapi import (
    FastAPI,
    HTTPException,
    Depends,
)

from fastapi.middleware.cors import CORSMiddleware

# Internal imports

from farmassist.schema import (
    DiseaseRisk,
    DiseaseRiskRequest,
    WeatherRequest,
    WeatherResult,
)

from farmassist.authorization import validate_api_key

from farmassist.logger import logger

from farmassist.logic import (
    estimate_disease_risk,
    get_nigerian_weather,
)

app = FastAPI(
    title="Farm Assist API",
    version="1.0",
    description="Weather and disease-risk endpoints for the Nigerian Farm Assistant",
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Endpoint: Health Check
@app.get("/health")
def health_check():
    return {"status": "ok", "message": "Farm Assist API is running"}

# Endpoint: API Version
@app.get("/version")
def get_version():
    return {"version": app.version}

# Endpoint: List Routes
@app.get("/routes")
def list_routes():
    return [{"path": route.path, "name": route.name} for route in app.router.routes]

# Endpoint: API Info
@app.get("/info")
def api_info():
    return {
        "app": "Farm Assist API",
        "version": app.version,
        "description": "Weather-driven disease risk for Nigerian crops and livestock",
        "docs": "/docs"
    }


# Endpoint: Disease Risk from a weather snapshot
@app.post(
    "/disease_risk",
    response_model=DiseaseRisk,
    dependencies=[Depends(validate_api_key)],
)
def disease_risk(data: DiseaseRiskRequest):
    return estimate_disease_risk(data.current, data.air_quality, data.farming_type)


# Endpoint: Nigerian Weather (with disease risk)
@app.post(
    "/weather",
    response_model=WeatherResult,
    dependencies=[Depends(validate_api_key)],
)
def weather(data: WeatherRequest):
    if not data.location.strip():
        raise HTTPException(400, "Location required")

    result = get_nigerian_weather(data)
    logger.info(f"Weather served for {data.location} (fallback={result.is_fallback})")
    return result
