import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config.security import SecurityConfig
from app.routers import auth, user, todo
from app.utils.exceptions import register_exception_handlers
from create_tables import init_database

logging.basicConfig(
    level=SecurityConfig.SERVER['log_level'],
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Todo Hierarchy API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=SecurityConfig.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Route registration
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(user.router, prefix="/users", tags=["Users"])
app.include_router(todo.router)

# Startup events
@app.on_event("startup")
def startup_event():
    """Create tables and default accounts when the application starts"""
    logger.info("Starting Todo Hierarchy API...")
    init_database()

# Root route
@app.get("/")
def read_root():
    return {"message": "Todo Hierarchy API"}

@app.get("/health")
def health():
    return {"status": "ok"}
