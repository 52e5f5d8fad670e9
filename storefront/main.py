# storefront/main.py
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from storefront.api.errors import register_error_handlers
from storefront.api.routers import carts, health, products
from storefront.data.database import Base, engine
from storefront.services.file_storage import FileStorage
from storefront.utils.logging import get_logger
from storefront.utils.settings import CORS_ORIGINS, HOST, PORT, UPLOADS_DIR

#register every model in Base.metadata before create_all
import storefront.data.models  # noqa: F401

logger = get_logger(__name__)


def init_db() -> None:
    logger.info(f"Initializing database, tables: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception:
        logger.exception("Failed to create tables")
        raise
    logger.info("Database tables ready")


def create_app() -> FastAPI:
    init_db()

    app = FastAPI(
        title="Storefront Service",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    # Include routers
    app.include_router(health.router)
    app.include_router(products.router)
    app.include_router(carts.router)

    # uploaded product images, /uploads/products/<id>/<file>
    storage = FileStorage(UPLOADS_DIR)
    app.mount("/uploads", StaticFiles(directory=storage.base_dir), name="uploads")

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host=HOST, port=PORT)
