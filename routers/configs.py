# routers/configs.py
from fastapi import APIRouter, Path, Request, status
from fastapi.responses import JSONResponse

from config import settings
from exceptions import ResourceNotFoundException
from models.configs import Config, ConfigValue

router = APIRouter()

# Option lists for the browser forms
configs: list[Config] = [
    Config(
        key="POSITION",
        name="Position",
        value=[
            ConfigValue(key="GK", label="Goalkeeper", sortOrder=1),
            ConfigValue(key="DEF", label="Defender", sortOrder=2),
            ConfigValue(key="MID", label="Midfielder", sortOrder=3),
            ConfigValue(key="FWD", label="Forward", sortOrder=4),
        ],
    ),
    Config(
        key="MATCHSTATUS",
        name="Match status",
        value=[
            ConfigValue(key="scheduled", label="Scheduled", sortOrder=1),
            ConfigValue(key="in-progress", label="In progress", sortOrder=2),
            ConfigValue(key="completed", label="Completed", sortOrder=3),
        ],
    ),
    Config(
        key="ROLE",
        name="Role",
        value=[
            ConfigValue(key="player", label="Player", sortOrder=1),
            ConfigValue(key="team", label="Team", sortOrder=2),
            ConfigValue(key="scout", label="Scout", sortOrder=3),
        ],
    ),
    Config(
        key="DOMINANTFOOT",
        name="Dominant foot",
        value=[
            ConfigValue(key="left", label="Left", sortOrder=1),
            ConfigValue(key="right", label="Right", sortOrder=2),
            ConfigValue(key="both", label="Both", sortOrder=3),
        ],
    ),
]


# Get all configs
@router.get("/", response_model=list[Config], response_description="Get all configs")
async def get_all_configs(request: Request):
    return JSONResponse(status_code=status.HTTP_200_OK, content=[config.model_dump() for config in configs])


# Key for the map view, rendered client side
@router.get("/maps", response_description="Get the maps configuration")
async def get_maps_config(request: Request):
    return JSONResponse(status_code=status.HTTP_200_OK, content={"apiKey": settings.GOOGLE_MAPS_API_KEY})


# Get one config
@router.get("/{key}", response_model=Config, response_description="Get one config")
async def get_one_config(request: Request, key: str = Path(...)):
    lower_key = key.lower()
    for config in configs:
        if config.key.lower() == lower_key:
            return JSONResponse(status_code=status.HTTP_200_OK, content=config.model_dump())
    raise ResourceNotFoundException(resource_type="Config", resource_id=key)
