import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from claims_backend.core import config
from claims_backend.database import Base, engine, ensure_claim_schema
from claims_backend.models import center, claim, department, user  # noqa: F401
from claims_backend.routes import auth_routes, center_routes, claim_routes, registry_routes

logging.basicConfig(level=config.LOG_LEVEL)

app = FastAPI(title='Claims API', debug=config.DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_claim_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Claims API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(claim_routes.router, prefix='/claims')
app.include_router(center_routes.router, prefix='/centers')
app.include_router(registry_routes.router, prefix='/registry')
