"""imgconv-api - Image to WebP/AVIF conversion API powered by Robyn."""

from robyn import Robyn

from imgconv.api.convert import router as convert_router
from imgconv.api.health import router as health_router
from imgconv.core.lifespan import create_lifespan
from imgconv.core.logger import logger
from imgconv.core.settings import settings as st
from imgconv.events.http_client import HttpClientEvent
from imgconv.events.process_pool import ProcessPoolEvent
from imgconv.middlewares.base import MiddlewareHandler
from imgconv.middlewares.cors import CorsMiddleware

app = Robyn(__file__)

# Lifespan events
lifespan = create_lifespan(app)
lifespan.register(HttpClientEvent).register(ProcessPoolEvent)

app.startup_handler(lifespan.startup)
app.shutdown_handler(lifespan.shutdown)

# Routers
app.include_router(health_router)
app.include_router(convert_router)

# Middlewares
middlewares = MiddlewareHandler(app)
middlewares.register(CorsMiddleware())


def main() -> None:
    logger.info("🚀 STARTING %s | HOST=%s | PORT=%s", st.API_NAME, st.API_HOST, st.API_PORT)
    app.start(host=st.API_HOST, port=st.API_PORT)


if __name__ == "__main__":
    main()
