"""FastAPI application entry point.

Run locally with:
    uv run uvicorn api.main:app --reload
"""

from typing import Any, Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from api import rules
from notifications.rule_evaluator import process_notification_rules
from notifications.rule_store import RuleStoreError
from shared.config import get_settings

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


class TriggerRequest(BaseModel):
    """Body posted by application actions when an event happens."""

    trigger_event: str = Field(..., min_length=1)
    entity_id: Optional[str] = None
    entity_data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("entity_id", mode="before")
    @classmethod
    def _entity_id_as_string(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("entity_data", mode="before")
    @classmethod
    def _null_entity_data_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value


# ============================================================================
# FastAPI App
# ============================================================================

app = FastAPI(
    title="MentalSpace Notification Rules API",
    description="Evaluates notification rules for application events",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins_list,
    allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=CORS_ALLOW_HEADERS,
)


@app.exception_handler(RuleStoreError)
async def rule_store_error_handler(request: Request, exc: RuleStoreError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": str(exc)})


# ============================================================================
# Routes
# ============================================================================


@app.options("/process-notification-rules")
def process_rules_preflight() -> Response:
    return Response(
        status_code=200,
        headers={
            "Access-Control-Allow-Origin": "*",
            "Access-Control-Allow-Headers": ", ".join(CORS_ALLOW_HEADERS),
        },
    )


@app.post("/process-notification-rules")
def process_rules(request: TriggerRequest) -> JSONResponse:
    try:
        result = process_notification_rules(
            request.trigger_event, request.entity_id, request.entity_data
        )
    except Exception as e:
        print(f"✗ Error processing notification rules: {e}")
        return JSONResponse(status_code=500, content={"error": str(e)})

    message = (
        "Notification rules processed" if result.matched else "No active rules found"
    )
    return JSONResponse(
        content={"message": message, "processed": result.processed, "sent": result.sent}
    )


app.include_router(rules.router, prefix="/notification-rules", tags=["notification-rules"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
