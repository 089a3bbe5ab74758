from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import time

from drugreport.app_logging import logger, setup_logging
from drugreport.config import settings
from drugreport.llm import extract_drug_name_from_image, get_generative_service
from drugreport.medical_apis import close_medical_api_client
from drugreport.models import DrugAnalysisInput, ExtractDrugInfoInput, Report
from drugreport.monitoring import monitor
from drugreport.pipeline import get_drug_report

setup_logging()

# Validate settings
settings.validate()

app = FastAPI(
    title="DrugReport - NAFDAC Drug Report Service",
    description="Looks up a drug in the NAFDAC Greenbook, collects openFDA side effects and writes a plain-language report",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
async def startup_event():
    """Log configuration on startup."""
    logger.info("🚀 DrugReport starting up")
    if not get_generative_service().available:
        logger.warning("OpenAI is not configured - summaries will use the fallback template")

@app.on_event("shutdown")
async def shutdown_event():
    """Clean up resources on shutdown."""
    logger.info("🛑 DrugReport shutting down - closing medical API client")
    await close_medical_api_client()

@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    """Add processing time to response headers."""
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response

@app.get("/health")
async def health():
    """Basic health check endpoint."""
    return {"status": "healthy", "timestamp": time.time()}

@app.get("/status")
async def status():
    """System status endpoint."""
    return {
        "status": "online",
        "timestamp": time.time(),
        "generation": "openai" if get_generative_service().available else "fallback",
        "registry_url": settings.NAFDAC_API_URL,
        "adverse_event_url": settings.OPENFDA_LABEL_URL,
        "metrics": monitor.get_metrics_summary(),
    }

@app.get("/metrics")
async def metrics(limit: int = 50):
    """Request metrics and recent activity."""
    return {
        "summary": monitor.get_metrics_summary(),
        "recent_requests": monitor.get_recent_requests(limit),
        "timestamp": time.time(),
    }

@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "DrugReport - NAFDAC Drug Report Service",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "status": "/status"
    }

@app.post("/report")
async def create_report(request: DrugAnalysisInput):
    """Build a drug report. Pipeline errors are returned as {"error": ...}."""
    start_time = time.time()
    logger.info(f"Processing drug report request: {request.drug_name[:50]}")

    result = await get_drug_report(request)

    processing_time = (time.time() - start_time) * 1000
    success = isinstance(result, Report)
    monitor.record_request(
        success=success,
        response_time_ms=processing_time,
        endpoint="/report",
        query=request.drug_name.strip(),
        outcome="report" if success else "error",
    )

    return JSONResponse(content=result.model_dump(by_alias=True))

@app.post("/extract-drug-name")
async def extract_drug_name(request: ExtractDrugInfoInput):
    """Read the most prominent drug name from a packaging photo."""
    start_time = time.time()
    try:
        drug_name = await extract_drug_name_from_image(request.photo_data_uri)
    except Exception as e:
        logger.error(f"Drug name extraction failed: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Drug name extraction failed: {str(e)}")

    monitor.record_request(
        success=bool(drug_name),
        response_time_ms=(time.time() - start_time) * 1000,
        endpoint="/extract-drug-name",
        outcome="name_found" if drug_name else "no_name",
    )
    return {"drugName": drug_name}
