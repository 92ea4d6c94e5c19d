"""HTTP endpoints. Every route just builds a request model and hands it to the service."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from src.api.models import (
    MAX_ID,
    MIN_ID,
    CreateGameRequest,
    DeleteGameRequest,
    GameResponse,
    GameStateResponse,
    GetGameRequest,
    HeadResponse,
    MoveLineSchema,
    MoveRequest,
    MoveResponse,
    RegisterUserRequest,
    SettingsSchema,
    UserResponse,
)
from src.db.database import get_db
from src.db.sql_repository import SQLGameRepository
from src.services.game_service import TankTacticsService

router = APIRouter()

GameId = Annotated[int, Path(ge=MIN_ID, le=MAX_ID)]


def get_service(db: Session = Depends(get_db)) -> TankTacticsService:
    return TankTacticsService(SQLGameRepository(db))


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register_user(
    request: RegisterUserRequest, service: TankTacticsService = Depends(get_service)
) -> UserResponse:
    return service.register_user(request)


@router.get("/games", response_model=list[GameResponse])
def list_games(service: TankTacticsService = Depends(get_service)) -> list[GameResponse]:
    return service.list_games()


@router.post("/games", response_model=GameResponse, status_code=status.HTTP_201_CREATED)
def create_game(
    settings: SettingsSchema, service: TankTacticsService = Depends(get_service)
) -> GameResponse:
    return service.create_game(CreateGameRequest(settings=settings))


@router.delete("/games/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_game(game_id: GameId, service: TankTacticsService = Depends(get_service)) -> None:
    service.delete_game(DeleteGameRequest(game_id=game_id))


@router.get("/games/{game_id}/head", response_model=HeadResponse)
def get_head(game_id: GameId, service: TankTacticsService = Depends(get_service)) -> HeadResponse:
    return service.get_head(GetGameRequest(game_id=game_id))


@router.get("/games/{game_id}/moves", response_model=list[MoveLineSchema])
def get_moves(
    game_id: GameId, service: TankTacticsService = Depends(get_service)
) -> list[MoveLineSchema]:
    return service.get_moves(GetGameRequest(game_id=game_id))


@router.post("/games/{game_id}/moves", response_model=MoveResponse, status_code=status.HTTP_201_CREATED)
def make_move(
    game_id: GameId, move: MoveLineSchema, service: TankTacticsService = Depends(get_service)
) -> MoveResponse:
    return service.make_move(MoveRequest(game_id=game_id, move=move))


@router.get("/games/{game_id}/users", response_model=list[UserResponse])
def get_users(
    game_id: GameId, service: TankTacticsService = Depends(get_service)
) -> list[UserResponse]:
    return service.get_users(GetGameRequest(game_id=game_id))


@router.get("/games/{game_id}/state", response_model=GameStateResponse)
def get_game_state(
    game_id: GameId, service: TankTacticsService = Depends(get_service)
) -> GameStateResponse:
    return service.get_game_state(GetGameRequest(game_id=game_id))
