import typer
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from flinkguard.exceptions import SpecValidationError
from flinkguard.modules import validate

app = typer.Typer()

def _reject(e: Exception) -> None:
    print(f"❌ {e}")
    raise typer.Exit(code=1)

@app.command("create")
def validate_create(file: str = typer.Argument(..., help="FlinkCluster manifest (YAML or JSON)")):
    """Validate a new FlinkCluster manifest."""
    try:
        cluster = validate.run_create(file)
    except (SpecValidationError, FileNotFoundError) as e:
        _reject(e)
    print(f"✅ FlinkCluster {cluster.key} is valid.")

@app.command("update")
def validate_update(
    old: str = typer.Argument(..., help="Currently stored FlinkCluster manifest"),
    new: str = typer.Argument(..., help="Updated FlinkCluster manifest"),
):
    """Validate an update of a FlinkCluster manifest."""
    try:
        cluster = validate.run_update(old, new)
    except (SpecValidationError, FileNotFoundError) as e:
        _reject(e)
    print(f"✅ Update of FlinkCluster {cluster.key} is allowed.")

@app.command("live")
def validate_live(
    file: str = typer.Argument(..., help="FlinkCluster manifest (YAML or JSON)"),
    kubeconfig: str = typer.Option(None, help="Path to kubeconfig"),
):
    """Validate a manifest against the FlinkCluster stored in Kubernetes."""
    try:
        path = validate.run_live(file, kubeconfig)
    except (SpecValidationError, FileNotFoundError, ConfigException) as e:
        _reject(e)
    except ApiException as e:
        _reject(f"Kubernetes API error ({e.status}): {e.reason}")
    print(f"✅ {path.capitalize()} of {file} is allowed.")
