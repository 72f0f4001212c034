from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
import database
from errors import register_exception_handlers
from logger import CustomLogger
from routes import album, artist, auth, favorite, track, user

console = CustomLogger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if database.db is not None:
        database.ensure_indexes(database.db)
        console.log(f"Connected to database '{config.DATABASE_NAME}'")
    else:
        console.warning("DATABASE_URL not set, database-backed endpoints will fail")
    yield
    if database.client is not None:
        database.client.close()


# FastAPI app
app = FastAPI(
    title="Music Catalog API",
    description="Artists, albums, tracks and per-user favorites",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


# Routes
@app.get("/")
def read_root():
    return {"message": "Music Catalog API running"}


@app.get("/health")
def health():
    """Report whether the backend can reach its database."""
    response = {
        "backend": "running",
        "database": "not configured",
        "database_name": None,
        "collections": [],
    }

    if database.db is not None:
        response["database_name"] = database.db.name
        try:
            response["collections"] = database.db.list_collection_names()[:10]
            response["database"] = "connected"
        except Exception as e:
            console.error(f"Health check could not reach the database: {e}")
            response["database"] = f"error: {str(e)[:50]}"

    return response


for module in (auth, user, artist, album, track, favorite):
    app.include_router(module.router, prefix=config.API_PREFIX)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
