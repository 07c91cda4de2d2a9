"""Configuration management for the flinkguard application."""
import os
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()

class Config:
    """Application configuration with sensible defaults."""

    # Admission webhook server
    WEBHOOK_HOST: str = os.getenv("WEBHOOK_HOST", "0.0.0.0")
    WEBHOOK_PORT: int = int(os.getenv("WEBHOOK_PORT", "9443"))
    WEBHOOK_CERT_FILE: str = os.getenv("WEBHOOK_CERT_FILE", "")
    WEBHOOK_KEY_FILE: str = os.getenv("WEBHOOK_KEY_FILE", "")

    # FlinkCluster resource coordinates
    FLINK_GROUP: str = os.getenv("FLINK_GROUP", "flinkoperator.k8s.io")
    FLINK_VERSION: str = os.getenv("FLINK_VERSION", "v1alpha1")
    FLINK_PLURAL: str = os.getenv("FLINK_PLURAL", "flinkclusters")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT: str = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    @classmethod
    def validate(cls) -> None:
        """Validate webhook configuration."""
        if bool(cls.WEBHOOK_CERT_FILE) != bool(cls.WEBHOOK_KEY_FILE):
            raise ValueError("WEBHOOK_CERT_FILE and WEBHOOK_KEY_FILE must be set together")
        if not 0 < cls.WEBHOOK_PORT < 65536:
            raise ValueError(f"Invalid WEBHOOK_PORT: {cls.WEBHOOK_PORT}")

# Don't validate on import to allow for dynamic configuration
# Call Config.validate() explicitly when needed
