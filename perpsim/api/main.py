"""
FastAPI main application for the paper-trading simulator.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routers import simulation

app = FastAPI(
    title="Paper Trading Simulation API",
    version="1.0.0",
    description="API for simulating LLM trading signals on a perpetual futures portfolio",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",  # Development frontend
        "http://localhost:8080",  # Alternative development port
    ],
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
        "X-Requested-With",
    ],
)

app.include_router(simulation.router, prefix="/api/simulation", tags=["simulation"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint returning API information."""
    return {"message": "Paper Trading Simulation API", "version": "1.0.0", "status": "running"}


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}
