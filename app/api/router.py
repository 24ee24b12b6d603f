"""Agregador de routers de la API."""
from fastapi import APIRouter
from app.api.routers import auth, health, notes, share

api_router = APIRouter()
api_router.include_router(health.router)
api_router.include_router(auth.router)
# share antes que notes: `/notes/import` no debe caer en `/notes/{note_id}`
api_router.include_router(share.router)
api_router.include_router(notes.router)
