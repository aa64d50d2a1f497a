"""FastAPI server for the clinic booking service.

Features:
- Pass-through proxy endpoints for the upstream lookup, time slots and booking
- Doctor directory filtering
- Booking wizard endpoints (date -> time slot -> form -> confirmation)
- Printable confirmation document
- Global exception handling and request IDs in every log line
"""
import asyncio
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response

from clinic_booking import __version__, config
from clinic_booking.booking import PatientInputError, build_booking_request
from clinic_booking.confirmation import render_printable
from clinic_booking.dependencies import get_clinic_client, get_session_manager
from clinic_booking.directory import DoctorNotFoundError, filter_doctors, find_doctor
from clinic_booking.logging_config import (
    RequestIDMiddleware,
    get_logger,
    setup_structured_logging,
)
from clinic_booking.models import (
    BookAppointmentBody,
    CreateWizardBody,
    DateSelectionBody,
    DoctorListResponse,
    ErrorResponse,
    PatientFormBody,
    PatientInput,
    TimeSlot,
    WizardView,
)
from clinic_booking.session_manager import WizardNotFoundError, WizardSessionManager
from clinic_booking.state import InvalidTransitionError, WizardStep
from clinic_booking.upstream import ClinicApiClient, UpstreamError
from clinic_booking.wizard import BookingWizard, InvalidSelectionError

setup_structured_logging(config.LOG_LEVEL, json_logs=config.LOG_JSON)
logger = get_logger(__name__)

CLEANUP_INTERVAL_SECONDS = 300


async def cleanup_wizards_periodically():
    """Background task to evict idle wizards."""
    while True:
        try:
            await asyncio.sleep(CLEANUP_INTERVAL_SECONDS)
            deleted = get_session_manager().cleanup_expired_wizards()
            if deleted:
                logger.info("wizards_evicted", count=deleted)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("wizard_cleanup_failed", error=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown logic."""
    logger.info("server_starting", upstream=config.CLINIC_API_BASE_URL)
    cleanup_task = asyncio.create_task(cleanup_wizards_periodically())

    yield

    cleanup_task.cancel()
    try:
        await cleanup_task
    except asyncio.CancelledError:
        logger.info("wizard_cleanup_cancelled")
    logger.info("server_stopped")


app = FastAPI(
    title="Clinic Booking API",
    description=f"Appointment booking for {config.CENTER_NAME}",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)
app.add_middleware(RequestIDMiddleware)


def _error(status_code: int, error: str, detail: Optional[str] = None, code: Optional[str] = None):
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, detail=detail, code=code).model_dump()
    )


# Global exception handlers
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors consistently."""
    logger.warning("validation_error", errors=str(exc.errors()))
    return _error(
        422,
        "Validation Error",
        str(exc.errors()),
        "VALIDATION_ERROR"
    )


@app.exception_handler(WizardNotFoundError)
async def wizard_not_found_handler(request: Request, exc: WizardNotFoundError):
    return _error(status.HTTP_404_NOT_FOUND, "Wizard Not Found", str(exc), "WIZARD_NOT_FOUND")


@app.exception_handler(DoctorNotFoundError)
async def doctor_not_found_handler(request: Request, exc: DoctorNotFoundError):
    return _error(status.HTTP_404_NOT_FOUND, "Doctor Not Found", str(exc), "DOCTOR_NOT_FOUND")


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    return _error(status.HTTP_409_CONFLICT, "Invalid Step", str(exc), "INVALID_TRANSITION")


@app.exception_handler(InvalidSelectionError)
async def invalid_selection_handler(request: Request, exc: InvalidSelectionError):
    return _error(
        422, "Invalid Selection", str(exc), "INVALID_SELECTION"
    )


@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    """Upstream details are logged by the client, never returned."""
    return _error(
        status.HTTP_502_BAD_GATEWAY,
        "Upstream Error",
        "The clinic service is unavailable. Please try again.",
        "UPSTREAM_ERROR"
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected exceptions."""
    logger.error("unexpected_error", error=str(exc), exc_info=True)
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal Server Error",
        "An unexpected error occurred. Please try again later.",
        "INTERNAL_ERROR"
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for load balancers."""
    return {
        "status": "healthy",
        "service": "clinic-booking-api",
        "version": __version__
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API info."""
    return {
        "message": f"{config.CENTER_NAME} Booking API",
        "docs": "/docs",
        "health": "/health"
    }


# =========================================================
# Upstream proxies
# =========================================================
@app.get("/api/lookup", tags=["Proxy"])
def lookup(client: ClinicApiClient = Depends(get_clinic_client)):
    """Clinics and doctors of the branch, as returned by the upstream."""
    try:
        return client.fetch_lookup_raw()
    except UpstreamError:
        return JSONResponse({"error": "Failed to fetch lookup data"}, status_code=500)


@app.get("/api/time-slots", tags=["Proxy"])
def time_slots(
    date: Optional[str] = Query(None),
    doctor_id: Optional[str] = Query(None, alias="doctorId"),
    client: ClinicApiClient = Depends(get_clinic_client),
):
    """Free slots of a doctor on a date (yyyy-MM-dd), as returned by the upstream."""
    if not date or not doctor_id:
        return JSONResponse({"error": "Missing required parameters"}, status_code=400)

    try:
        return client.fetch_time_slots_raw(doctor_id, date)
    except UpstreamError:
        return JSONResponse({"error": "Failed to fetch time slots"}, status_code=500)


@app.post("/api/book-appointment", tags=["Proxy"])
def book_appointment(
    body: BookAppointmentBody,
    client: ClinicApiClient = Depends(get_clinic_client),
):
    """
    Forward a booking to the upstream as its fixed-shape record.

    The mobile number arrives already normalized by the form.

    Returns:
        The upstream JSON body on success; any shape is accepted
    """
    booking = build_booking_request(
        body.doctor_id,
        body.date,
        body.time_slot,
        PatientInput(
            full_name=body.full_name,
            mobile=body.mobile,
            description=body.description or "",
        ),
    )
    try:
        response_body = client.add_appointment(booking)
    except UpstreamError:
        return JSONResponse({"error": "Failed to book appointment"}, status_code=500)

    if response_body is None:
        return Response(status_code=status.HTTP_200_OK)
    return response_body


# =========================================================
# Directory
# =========================================================
@app.get("/api/doctors", tags=["Directory"], response_model=DoctorListResponse)
def doctors(
    clinic_id: str = Query(config.ALL_CLINICS, alias="clinicId"),
    search: str = Query(""),
    client: ClinicApiClient = Depends(get_clinic_client),
):
    """Doctors filtered by clinic ("0" for all) and case-insensitive name search."""
    lookup_data = client.fetch_lookup()
    matches = filter_doctors(lookup_data.doctors, clinic_id, search)
    return DoctorListResponse(doctors=matches, total=len(matches))


# =========================================================
# Booking wizard
# =========================================================
@app.post(
    "/api/wizards",
    tags=["Wizard"],
    response_model=WizardView,
    status_code=status.HTTP_201_CREATED,
)
def create_wizard(
    body: CreateWizardBody,
    client: ClinicApiClient = Depends(get_clinic_client),
    wizards: WizardSessionManager = Depends(get_session_manager),
):
    """Open a booking wizard for a doctor; it starts on the date step."""
    doctor = find_doctor(client.fetch_lookup(), body.doctor_id)
    wizard = wizards.add(BookingWizard(doctor, client))
    logger.info("wizard_opened", wizard_id=wizard.id, doctor_id=doctor.doctor_id)
    return wizard.view()


@app.get("/api/wizards/{wizard_id}", tags=["Wizard"], response_model=WizardView)
def get_wizard(wizard_id: str, wizards: WizardSessionManager = Depends(get_session_manager)):
    return wizards.get(wizard_id).view()


@app.post("/api/wizards/{wizard_id}/date", tags=["Wizard"], response_model=WizardView)
def select_date(
    wizard_id: str,
    body: DateSelectionBody,
    wizards: WizardSessionManager = Depends(get_session_manager),
):
    """
    Select the appointment date and load its free slots.

    A failed slot load still moves to the time slot step; the view then
    carries an error message and no slots.
    """
    wizard = wizards.get(wizard_id)
    wizard.select_date(body.date)
    return wizard.view()


@app.post("/api/wizards/{wizard_id}/time-slots/refresh", tags=["Wizard"], response_model=WizardView)
def refresh_time_slots(wizard_id: str, wizards: WizardSessionManager = Depends(get_session_manager)):
    wizard = wizards.get(wizard_id)
    wizard.refresh_time_slots()
    return wizard.view()


@app.post("/api/wizards/{wizard_id}/time-slot", tags=["Wizard"], response_model=WizardView)
def select_time_slot(
    wizard_id: str,
    slot: TimeSlot,
    wizards: WizardSessionManager = Depends(get_session_manager),
):
    wizard = wizards.get(wizard_id)
    wizard.select_time_slot(slot)
    return wizard.view()


@app.post("/api/wizards/{wizard_id}/submit", tags=["Wizard"], response_model=WizardView)
def submit_patient_form(
    wizard_id: str,
    form: PatientFormBody,
    wizards: WizardSessionManager = Depends(get_session_manager),
):
    """
    Validate the patient form and book the appointment.

    Responses:
        200: Booked; the view is on the confirmation step
        422: Form rejected; still on the form step with an error
        502: Upstream booking failed; still on the form step with an error
    """
    wizard = wizards.get(wizard_id)
    try:
        wizard.submit(form.full_name, form.prefix, form.mobile_rest, form.description)
    except PatientInputError:
        return JSONResponse(
            status_code=422,
            content=wizard.view().model_dump(mode="json", by_alias=True),
        )
    except UpstreamError:
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content=wizard.view().model_dump(mode="json", by_alias=True),
        )
    return wizard.view()


@app.post("/api/wizards/{wizard_id}/back", tags=["Wizard"], response_model=WizardView)
def go_back(wizard_id: str, wizards: WizardSessionManager = Depends(get_session_manager)):
    wizard = wizards.get(wizard_id)
    wizard.back()
    return wizard.view()


@app.delete("/api/wizards/{wizard_id}", tags=["Wizard"], status_code=status.HTTP_204_NO_CONTENT)
def close_wizard(wizard_id: str, wizards: WizardSessionManager = Depends(get_session_manager)):
    """Tear the wizard down; nothing of it is kept."""
    wizards.close(wizard_id)
    logger.info("wizard_closed", wizard_id=wizard_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get(
    "/api/wizards/{wizard_id}/confirmation/print",
    tags=["Wizard"],
    response_class=HTMLResponse,
)
def print_confirmation(wizard_id: str, wizards: WizardSessionManager = Depends(get_session_manager)):
    """Printable confirmation page; opens the browser's print dialog on load."""
    wizard = wizards.get(wizard_id)
    if wizard.step != WizardStep.CONFIRMATION or wizard.booking is None:
        raise InvalidTransitionError(wizard.step, "print a confirmation")
    return HTMLResponse(render_printable(wizard.booking))


# Convenience: allow running via `python -m clinic_booking.api_server`
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "clinic_booking.api_server:app",
        host=config.HOST,
        port=config.PORT,
    )
