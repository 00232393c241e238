import logging
import sys


def configure_logging(level: int = logging.INFO) -> None:
    """Console logging for the intake service, with noisy libraries turned down."""

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    formatter = logging.Formatter(
        '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S'
    )
    console_handler.setFormatter(formatter)

    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)

    # Keep warnings and errors from these, drop the chatter
    for name in ("uvicorn.access", "httpx", "httpcore", "openai"):
        logging.getLogger(name).setLevel(logging.WARNING)

    # One line per pipeline stage is too much outside debugging
    logging.getLogger("intake_agent.logging.flight_recorder").setLevel(logging.WARNING)
    logging.getLogger("intake_agent").setLevel(level)


if __name__ == "__main__":
    configure_logging()
