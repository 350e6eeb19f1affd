from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

import models  # noqa: F401  註冊所有 table
from database import Base, engine, get_settings
from api import games, players


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: 設定 logging，並在應用啟動時建立資料庫表
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    Base.metadata.create_all(bind=engine)
    yield


app = FastAPI(
    title="RPS Escrow Game API",
    description="Two-player wagered rock/paper/scissors with escrowed stakes",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure this properly in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(games.router)
app.include_router(players.router)


@app.get("/")
def root():
    return {"message": "RPS Escrow Game API", "status": "ok"}


@app.get("/health")
def health():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
