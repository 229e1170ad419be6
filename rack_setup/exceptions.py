"""Rack setup errors and FastAPI exception handlers."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class AppError(Exception):
    """Base application error."""

    def __init__(self, error: str, message: str, status_code: int = 400, details: dict | None = None):
        self.error = error
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ValidationError(AppError):
    def __init__(self, message: str, details: dict | None = None):
        super().__init__("VALIDATION_ERROR", message, 400, details)


class MissingPrerequisiteError(AppError):
    """A field required to start rack setup has not been supplied yet."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__("MISSING_PREREQUISITE", message, 409, {"field": field})


class SledSelectionError(AppError):
    """The requested bootstrap sled selection does not match the inventory."""

    def __init__(self, message: str, slot: int | None = None, baseboard: str | None = None):
        self.slot = slot
        details: dict = {}
        if slot is not None:
            details["slot"] = slot
        if baseboard is not None:
            details["baseboard"] = baseboard
        super().__init__("INVALID_SLED_SELECTION", message, 400, details or None)


class SelfMissingFromInventoryError(SledSelectionError):
    def __init__(self, baseboard: str):
        super().__init__(
            f"Inventory is missing the sled where this service is running ({baseboard})",
            baseboard=baseboard,
        )


class CannotRemoveSelfError(SledSelectionError):
    def __init__(self, slot: int, baseboard: str):
        super().__init__(
            f"Cannot remove the sled where this service is running "
            f"(sled {slot}: {baseboard}) from bootstrap_sleds",
            slot=slot,
            baseboard=baseboard,
        )


class UnknownSledError(SledSelectionError):
    def __init__(self, slot: int):
        super().__init__(f"cannot add unknown sled {slot} to bootstrap_sleds", slot=slot)


class CertificateValidationError(AppError):
    def __init__(self, message: str):
        super().__init__("INVALID_CERTIFICATE", message, 400)


class AddressResolutionError(AppError):
    """A selected sled has no currently known bootstrap address."""

    def __init__(self, slot: int, baseboard: str):
        self.slot = slot
        super().__init__(
            "BOOTSTRAP_ADDRESS_UNKNOWN",
            f"IP address not (yet?) known for sled {slot} ({baseboard})",
            409,
            {"slot": slot, "baseboard": baseboard},
        )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""

    @app.exception_handler(AppError)
    async def _app_error_handler(_request: Request, exc: AppError) -> JSONResponse:
        body: dict = {"error": exc.error, "message": exc.message}
        if exc.details:
            body["details"] = exc.details
        return JSONResponse(status_code=exc.status_code, content=body)
