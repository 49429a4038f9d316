import uvicorn

from chat_relay.core.app_factory import create_app

app = create_app()


def run() -> None:
    """Serve the API with uvicorn (``chat-relay`` console script)."""
    uvicorn.run(
        "chat_relay.main:app",
        host="0.0.0.0",
        port=8080,
        log_config=None,
    )


if __name__ == "__main__":
    run()
