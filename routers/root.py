from fastapi import APIRouter

router = APIRouter()
endpoints = [
    {"name": "Matches", "url": "/matches"},
    {"name": "Available players", "url": "/players/available"},
    {"name": "Users", "url": "/users"},
    {"name": "Configs", "url": "/configs"},
]


@router.get("/", response_description="List all entry API endpoints")
async def get_root():
    return endpoints
