from typing import Any, Dict

from fastapi import APIRouter
from pydantic import BaseModel

from flinkguard.modules import admission

router = APIRouter(tags=["AdmissionWebhook"])

class AdmissionReview(BaseModel):
    apiVersion: str = admission.ADMISSION_API_VERSION
    kind: str = "AdmissionReview"
    request: Dict[str, Any]

@router.post("/validate-flinkcluster")
def validate_flinkcluster(req: AdmissionReview):
    return admission.review(req.request)
