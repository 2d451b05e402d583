from __future__ import annotations

import logging

from sentiment_map.dashboard import build_session, create_app
from sentiment_map.settings import load_settings

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger(__name__)


def main() -> None:
    s = load_settings()

    session = build_session(s)
    status = session.reload()
    logger.info("Initial load: status=%s locator=%s", status.value, s.data_locator)

    app = create_app(settings=s, session=session, load=False)
    try:
        app.run(host=s.host, port=s.port, debug=s.debug)
    finally:
        session.dispose()


if __name__ == "__main__":
    main()
