"""FastAPI application factory for the CrediSphere API."""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

from aiosqlite import connect as aiosqlite_connect
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from credisphere.auth import (
    MemberQueries,
    UserQueries,
    Validate,
    configure_auth_router,
    configure_role_router,
)
from credisphere.clubs import ClubQueries, configure_club_router
from credisphere.common import Database, Role, utc_now
from credisphere.common.errors import register_exception_handlers
from credisphere.competitions import CompetitionQueries, configure_competition_router
from credisphere.config import configure_logging, load_config_from_env
from credisphere.day_closes import DayCloseQueries, configure_day_close_router
from credisphere.groups import GroupQueries, configure_group_router
from credisphere.parties import PartyQueries, configure_party_router
from credisphere.players import PlayerQueries, configure_player_router
from credisphere.site_settings import SiteSettingQueries, configure_site_setting_router
from credisphere.users import configure_user_router

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from credisphere.config import AppConfig

LOGGER = logging.getLogger(__name__)
LOGGER.setLevel(logging.DEBUG)


async def _bootstrap_admin(config: "AppConfig", users: UserQueries) -> None:
    """Create the first super admin when the users table is empty."""
    if config.bootstrap_admin is None or await users.count_users() > 0:
        return
    name, email, password = config.bootstrap_admin
    hashed_password = await config.security_manager.hash_password(password)
    await users.create_user(name, email.lower(), hashed_password, Role.SUPER_ADMIN.value)
    LOGGER.info("Created initial super admin %s", email)


def configure_fastapi_app(config: "AppConfig") -> FastAPI:
    """Configure and return the FastAPI application.

    :param config: Application configuration
    :return: Configured FastAPI application
    """
    if not Path(config.database_path).parent.exists():
        Path(config.database_path).parent.mkdir(parents=True, exist_ok=True)
        LOGGER.info(
            "Created directory for database at %s",
            Path(config.database_path).parent,
        )

    if not Path(config.database_path).exists():
        LOGGER.info("Database file does not exist at %s", config.database_path)

    upload_root = Path(config.upload_root)
    upload_root.mkdir(parents=True, exist_ok=True)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> "AsyncGenerator[Any, Any]":
        """Application lifespan manager.

        Opens the database, creates the tables and mounts every resource
        router under the API prefix.
        """
        LOGGER.info("%s API is starting", config.app_name)

        async with aiosqlite_connect(config.database_path) as db_connection:
            database = await Database.prepare(db_connection)

            users = UserQueries(database)
            members = MemberQueries(database)
            clubs = ClubQueries(database, users)
            groups = GroupQueries(database)
            competitions = CompetitionQueries(database)
            players = PlayerQueries(database)
            parties = PartyQueries(database)
            day_closes = DayCloseQueries(database)
            settings = SiteSettingQueries(database)

            # Referenced tables first.
            for repository in (
                users,
                members,
                clubs,
                groups,
                competitions,
                players,
                parties,
                day_closes,
                settings,
            ):
                await repository.initialize_tables()

            await _bootstrap_admin(config, users)

            validate = Validate(users, members, config.security_manager)

            auth_router = configure_auth_router(
                APIRouter(),
                validate,
                default_role=config.default_user_role,
                allow_registration=config.allow_registration,
            )
            prefix = config.api_prefix

            app.include_router(auth_router, prefix=f"{prefix}/auth", tags=["auth"])
            app.include_router(
                configure_role_router(APIRouter(), validate),
                prefix=f"{prefix}/roles",
                tags=["roles"],
            )
            app.include_router(
                configure_user_router(APIRouter(), users, validate),
                prefix=f"{prefix}/users",
                tags=["users"],
            )
            app.include_router(
                configure_club_router(APIRouter(), clubs, validate),
                prefix=f"{prefix}/clubs",
                tags=["clubs"],
            )
            app.include_router(
                configure_group_router(APIRouter(), groups, validate),
                prefix=f"{prefix}/groups",
                tags=["groups"],
            )
            app.include_router(
                configure_competition_router(APIRouter(), competitions, groups, validate),
                prefix=f"{prefix}/competitions",
                tags=["competitions"],
            )
            app.include_router(
                configure_player_router(APIRouter(), players, groups, validate, upload_root),
                prefix=f"{prefix}/players",
                tags=["players"],
            )
            app.include_router(
                configure_party_router(APIRouter(), parties, validate),
                prefix=f"{prefix}/parties",
                tags=["parties"],
            )
            app.include_router(
                configure_day_close_router(APIRouter(), day_closes, validate),
                prefix=f"{prefix}/day-closes",
                tags=["day-closes"],
            )
            app.include_router(
                configure_site_setting_router(APIRouter(), settings, validate),
                prefix=f"{prefix}/site-settings",
                tags=["site-settings"],
            )

            yield

            LOGGER.info("%s API is shutting down", config.app_name)

    app = FastAPI(
        title=f"{config.app_name} API",
        version="0.1.0",
        lifespan=lifespan,
        root_path=config.root_path,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.mount("/uploads", StaticFiles(directory=upload_root), name="uploads")

    @app.get("/")
    def read_root() -> str:
        return f"{config.app_name} API"

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "OK", "timestamp": utc_now()}

    return app


def create_app(env_file: str | None = os.environ.get("ENV_FILE", ".env")) -> FastAPI:
    """Create and configure the FastAPI application.

    The default here is for uvicorn command line usage, in which case the user
    should set ENV_FILE environment variable if they want a different file.

    :param env_file: Optional path to the environment configuration file
    :return: Configured FastAPI application
    """
    config = load_config_from_env(env_file)
    configure_logging(config)
    return configure_fastapi_app(config)
