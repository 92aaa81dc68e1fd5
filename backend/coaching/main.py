import logging
import uuid

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coaching.core.config import settings
from coaching.core.database import Base, SessionLocal, engine
from coaching.models import User, UserRole  # noqa: F401 - register models
from coaching.routers import auth, courses, health, materials, notifications, payments, users
from coaching.services.phone import normalize_phone

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Zero Classes API",
    description="Online coaching: course sessions, materials, OTP sign-up and simulated checkout",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

prefix = settings.API_PREFIX
app.include_router(health.router, prefix=f"{prefix}/health")
app.include_router(auth.router, prefix=f"{prefix}/auth")
app.include_router(courses.router, prefix=f"{prefix}/courses")
app.include_router(materials.router, prefix=f"{prefix}/materials")
app.include_router(payments.router, prefix=f"{prefix}/payments")
app.include_router(users.router, prefix=f"{prefix}/users")
app.include_router(notifications.router, prefix=f"{prefix}/notifications")


@app.on_event("startup")
async def startup():
    Base.metadata.create_all(bind=engine)
    # Seed an admin account if none exists (credentials from ADMIN_* settings)
    db = SessionLocal()
    try:
        if db.query(User).filter(User.role == UserRole.ADMIN).first() is None:
            admin = User(
                id=str(uuid.uuid4()),
                name=settings.ADMIN_NAME,
                email=settings.ADMIN_EMAIL,
                phone=normalize_phone(settings.ADMIN_PHONE),
                password=settings.ADMIN_PASSWORD,
                role=UserRole.ADMIN,
            )
            db.add(admin)
            db.commit()
            logger.info("Seeded admin account %s", settings.ADMIN_EMAIL)
    finally:
        db.close()
