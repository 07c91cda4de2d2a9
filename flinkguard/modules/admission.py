"""Admission review handling for the FlinkCluster validating webhook."""
import logging
from typing import Any, Dict

from flinkguard.exceptions import MalformedResource, SpecValidationError
from flinkguard.models import FlinkCluster
from flinkguard.validator import Validator

logger = logging.getLogger(__name__)

ADMISSION_API_VERSION = "admission.k8s.io/v1"

validator = Validator()

def review(request: Dict[str, Any]) -> Dict[str, Any]:
    """Decide an AdmissionReview request and return the review response.

    CREATE and UPDATE are validated; every other operation is allowed.
    """
    uid = request.get("uid")
    operation = request.get("operation")
    response: Dict[str, Any] = {"uid": uid, "allowed": True}

    try:
        if operation == "CREATE":
            validator.validate_create(FlinkCluster.from_dict(request.get("object") or {}))
        elif operation == "UPDATE":
            old = FlinkCluster.from_dict(request.get("oldObject") or {})
            new = FlinkCluster.from_dict(request.get("object") or {})
            validator.validate_update(old, new)
        else:
            logger.debug(f"Allowing {operation} request {uid} without validation")
    except MalformedResource as e:
        response["allowed"] = False
        response["status"] = {"code": 400, "message": str(e)}
    except SpecValidationError as e:
        response["allowed"] = False
        response["status"] = {"code": 403, "message": str(e)}

    return {
        "apiVersion": ADMISSION_API_VERSION,
        "kind": "AdmissionReview",
        "response": response,
    }
