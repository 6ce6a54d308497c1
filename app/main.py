from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from .api import bridge, chat, health
from .config import settings
from .core.chat import AgentUnavailableError
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware

setup_logging()

# Create FastAPI app
app = FastAPI(
    title="Lilikoi Agent API",
    description="DeFi chat agents for EDU Chain and Arbitrum",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(chat.router, tags=["Chat"])
app.include_router(bridge.router, tags=["Bridge"])


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()) if part != 'body')}: {err.get('msg')}"
        for err in exc.errors()
    )
    return chat.error_response(
        f"Invalid request: {errors}",
        status_code=422,
        content="Sorry, I couldn't understand that request.",
    )


@app.exception_handler(AgentUnavailableError)
async def agent_unavailable_handler(request: Request, exc: AgentUnavailableError):
    return chat.error_response(f"Agent unavailable: {exc}")


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "Lilikoi Agent API",
        "version": "0.1.0",
        "description": "DeFi chat agents for EDU Chain and Arbitrum",
        "docs": "/docs",
        "health": "/healthz"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
