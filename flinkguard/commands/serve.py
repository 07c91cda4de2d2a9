import typer
import uvicorn

from flinkguard.config import Config

app = typer.Typer()

@app.command("webhook")
def serve_webhook(
    host: str = typer.Option(Config.WEBHOOK_HOST, help="Address to bind"),
    port: int = typer.Option(Config.WEBHOOK_PORT, help="Port to bind"),
):
    """Run the FlinkCluster validating admission webhook."""
    Config.validate()
    print(f"🚀 Serving admission webhook on {host}:{port}")
    uvicorn.run(
        "flinkguard.api.main:app",
        host=host,
        port=port,
        ssl_certfile=Config.WEBHOOK_CERT_FILE or None,
        ssl_keyfile=Config.WEBHOOK_KEY_FILE or None,
        log_level=Config.LOG_LEVEL.lower()
    )
