import typer
import logging
import sys
from flinkguard.commands import serve, validate

app = typer.Typer()

# Global debug flag
debug_mode = False

# Configure logging
def setup_logging(debug_mode: bool = False):
    """Configure logging based on debug mode."""
    log_level = logging.DEBUG if debug_mode else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler()
        ]
    )
    # Disable debug logging for noisy libraries
    if not debug_mode:
        logging.getLogger('urllib3').setLevel(logging.WARNING)
        logging.getLogger('kubernetes').setLevel(logging.WARNING)

# Add all command groups
app.add_typer(validate.app, name="validate")
app.add_typer(serve.app, name="serve")

# Global options callback
@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """flinkguard - FlinkCluster admission validation."""
    global debug_mode
    debug_mode = debug
    setup_logging(debug)
    if debug:
        logging.debug("Debug mode enabled")

if __name__ == "__main__":
    try:
        app()
    except Exception as e:
        if debug_mode:
            import traceback
            logging.error(f"Unhandled exception: {e}\n{traceback.format_exc()}")
        else:
            logging.error(f"Error: {e}")
        sys.exit(1)
