from tortoise import Tortoise

from config.settings import DATABASE_URL

TORTOISE_ORM = {
    "connections": {"default": DATABASE_URL},
    "apps": {
        "models": {
            "models": ["apps.blobs.models"],
            "default_connection": "default",
        },
    },
}


async def init_db(db_url: str | None = None, generate_schemas: bool = True) -> None:
    config = TORTOISE_ORM
    if db_url:
        config = {**TORTOISE_ORM, "connections": {"default": db_url}}
    await Tortoise.init(config=config)
    if generate_schemas:
        await Tortoise.generate_schemas(safe=True)


async def close_db() -> None:
    await Tortoise.close_connections()
