# backend/main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

load_dotenv()

from config import settings
from database import init_db
from utils.logging_config import setup_logging

# Routers
from routes.auth import router as auth_router
from routes.shop import router as shop_router
from routes.customization import router as customization_router
from routes.cart import router as cart_router
from routes.orders import router as orders_router

# Initialization
setup_logging(settings.LOG_LEVEL)
init_db()

app = FastAPI(title="Gift Basket Shop API", version="1.0.0")

# CORS: local dev frontends plus the configured one
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Router registration
app.include_router(auth_router)
app.include_router(shop_router)
app.include_router(customization_router)
app.include_router(cart_router)
app.include_router(orders_router)

@app.get("/")
def read_root():
    return {"message": "Gift Basket Shop API is running"}
